"""Identity directory — read-only lookups used by every lifecycle decision."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from logistics.errors import NotFound
from logistics.user.user import User, UserRole


def find_by_id(user_id: str) -> User:
    """Return the user with ``user_id`` or raise ``NotFound``."""
    try:
        return current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError as exc:
        raise NotFound("user_exists", f"User {user_id} does not exist") from exc


def list_by_role(role: UserRole | str) -> list[User]:
    if isinstance(role, UserRole):
        return current_domain.repository_for(User).with_role(role.value)
    try:
        value = UserRole(role).value
    except ValueError as exc:
        raise ValidationError({"role": [f"Unknown role: {role!r}"]}) from exc
    return current_domain.repository_for(User).with_role(value)
