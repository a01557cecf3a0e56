"""User aggregate — the identity directory's record of a platform participant.

A user's role decides what they may do with deliveries: business users create
them, administrators assign drivers, drivers carry them out. The role is fixed
at registration; there is no operation that changes it.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String, ValueObject

from logistics.domain import logistics
from logistics.shared.email import EmailAddress
from logistics.shared.phone import PhoneNumber
from logistics.user.events import UserRegistered


class UserRole(Enum):
    ADMIN = "ADMIN"
    BUSINESS_USER = "BUSINESS_USER"
    DRIVER = "DRIVER"


@logistics.aggregate
class User:
    email = ValueObject(EmailAddress, required=True)
    full_name = String(required=True, max_length=255)
    phone_number = ValueObject(PhoneNumber)
    role = String(required=True, choices=UserRole)
    registered_at = DateTime()

    @classmethod
    def register(cls, email: str, full_name: str, role: str, phone_number: str | None = None):
        """Create a new user with an immutable role."""
        now = datetime.now(UTC)
        normalized = email.strip().lower()
        user = cls(
            email=EmailAddress(address=normalized),
            full_name=full_name,
            phone_number=PhoneNumber(number=phone_number) if phone_number else None,
            role=role,
            registered_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=normalized,
                full_name=full_name,
                role=role,
                registered_at=now,
            )
        )
        return user

    def has_role(self, role: UserRole) -> bool:
        return self.role == role.value
