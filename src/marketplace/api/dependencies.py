"""Request-scoped dependencies: who is calling."""

from fastapi import Header, HTTPException

from marketplace.shared.principal import Principal
from marketplace.user.user import Role
from marketplace.utils.logging import add_context

_ROLES = {role.value for role in Role}


def current_principal(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> Principal:
    """The principal forwarded by the auth layer in ``X-Actor-Id``/``X-Actor-Role``."""
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing X-Actor-Id or X-Actor-Role header")

    role = x_actor_role.upper()
    if role not in _ROLES:
        raise HTTPException(status_code=401, detail=f"Unknown role {x_actor_role!r}")

    add_context(actor_id=x_actor_id, actor_role=role)
    return Principal(user_id=x_actor_id, role=role)


def optional_principal(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> Principal | None:
    """Like ``current_principal`` but anonymous callers get ``None``."""
    if not x_actor_id or not x_actor_role:
        return None
    return current_principal(x_actor_id, x_actor_role)
