"""Repository for the User aggregate."""

from logistics.domain import logistics
from logistics.user.user import User


@logistics.repository(part_of=User)
class UserRepository:
    def with_role(self, role: str) -> list[User]:
        """All users holding the given role, oldest registration first."""
        users = self._dao.query.filter(role=role).all().items
        return sorted(users, key=lambda u: u.registered_at)
