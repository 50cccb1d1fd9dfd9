"""User aggregate: the directory of marketplace participants.

Authentication happens elsewhere; the core only needs to know that a
principal exists and which role they hold.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String

from marketplace.domain import marketplace
from marketplace.user.events import UserRegistered


class Role(Enum):
    BUYER = "BUYER"
    FARMER = "FARMER"
    ADMIN = "ADMIN"


class Language(Enum):
    EN = "en"
    NE = "ne"


def is_admin(role) -> bool:
    """True when ``role`` (enum or raw value) is the moderator/admin role."""
    return _role_value(role) == Role.ADMIN.value


def _role_value(role):
    return role.value if isinstance(role, Role) else role


@marketplace.aggregate
class User:
    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254, unique=True)
    role: String(choices=Role, required=True)
    language: String(choices=Language, default=Language.EN.value)
    is_active: Boolean(default=True)
    registered_at: DateTime()

    @invariant.post
    def email_must_look_like_an_address(self):
        email = self.email or ""
        local, _, domain_part = email.partition("@")
        if not local or "." not in domain_part or " " in email:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

    @classmethod
    def register(cls, name, email, role, language=Language.EN.value):
        now = datetime.now(UTC)
        user = cls(
            name=name,
            email=email.strip().lower(),
            role=_role_value(role),
            language=language or Language.EN.value,
            is_active=True,
            registered_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=user.email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def is_buyer(self) -> bool:
        return self.role == Role.BUYER.value

    @property
    def is_farmer(self) -> bool:
        return self.role == Role.FARMER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value
