"""User registration: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import NotFound
from marketplace.user.user import Language, User


@marketplace.command(part_of="User")
class RegisterUser:
    name: String(required=True, max_length=100)
    email: String(required=True, max_length=254)
    role: String(required=True, max_length=10)
    language: String(max_length=2, default=Language.EN.value)


@marketplace.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)

        email = command.email.strip().lower()
        if repo._dao.query.filter(email=email).all().items:
            raise ValidationError({"email": ["A user with this email is already registered"]})

        user = User.register(
            name=command.name,
            email=email,
            role=command.role,
            language=command.language,
        )
        repo.add(user)
        logger.info("User registered", user_id=str(user.id), role=user.role)
        return str(user.id)


def load_user(user_id) -> User:
    """Fetch a user or raise ``NotFound``."""
    user = current_domain.repository_for(User).get_or_none(user_id)
    if user is None:
        raise NotFound("User", user_id)
    return user
