"""User registration — command and handler.

Credential storage is handled outside this context; registration only records
who the user is and which role they hold.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.projections.user_lookup import UserLookup
from logistics.user.user import User, UserRole
from logistics.utils.logging import get_logger

logger = get_logger(__name__)


@logistics.command(part_of="User")
class RegisterUser:
    """Add a new user to the directory."""

    email = String(required=True, max_length=254)
    full_name = String(required=True, max_length=255)
    role = String(required=True, choices=UserRole)
    phone_number = String(max_length=20)


@logistics.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        email = command.email.strip().lower()
        try:
            current_domain.repository_for(UserLookup).get(email)
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"email": [f"A user with email {email} is already registered"]})

        user = User.register(
            email=email,
            full_name=command.full_name,
            role=command.role,
            phone_number=command.phone_number,
        )
        current_domain.repository_for(User).add(user)
        logger.info("User registered", user_id=str(user.id), role=user.role)
        return str(user.id)


def register_user(email: str, full_name: str, role: str, phone_number: str | None = None) -> User:
    """Register a user and return the stored record."""
    user_id = current_domain.process(
        RegisterUser(email=email, full_name=full_name, role=role, phone_number=phone_number),
        asynchronous=False,
    )
    return current_domain.repository_for(User).get(user_id)
