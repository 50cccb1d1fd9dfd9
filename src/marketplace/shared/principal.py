"""The authenticated caller, as handed over by the auth/context provider."""

from dataclasses import dataclass

from marketplace.user.user import Role


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_buyer(self) -> bool:
        return self.role == Role.BUYER.value

    @property
    def is_farmer(self) -> bool:
        return self.role == Role.FARMER.value
