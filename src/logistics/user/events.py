"""Domain events for the User aggregate."""

from protean.fields import DateTime, Identifier, String

from logistics.domain import logistics


@logistics.event(part_of="User")
class UserRegistered:
    """A user joined the platform with a fixed role."""

    __version__ = "v1"

    user_id = Identifier(required=True)
    email = String(required=True)
    full_name = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)
