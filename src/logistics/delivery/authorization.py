"""Authorization predicate — who may do what with a delivery.

Every intent consults ``allowed_operations`` with the caller's verified role and
the delivery in its current state. There is no other place where role or
ownership rules live.
"""

from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ValidationError

from logistics.errors import Forbidden, NotFound
from logistics.user.directory import find_by_id
from logistics.user.user import UserRole


class Operation(Enum):
    VIEW = "view"
    ASSIGN = "assign"
    TRANSITION = "transition"


@dataclass(frozen=True)
class Caller:
    """The identity an intent is issued under. Authentication happens upstream."""

    user_id: str
    role: UserRole

    @classmethod
    def of(cls, user_id: str, role: UserRole | str) -> "Caller":
        if isinstance(role, UserRole):
            return cls(user_id=str(user_id), role=role)
        try:
            return cls(user_id=str(user_id), role=UserRole(role))
        except ValueError as exc:
            raise ValidationError({"role": [f"Unknown role: {role!r}"]}) from exc


_ADMIN_OPERATIONS = frozenset({Operation.VIEW, Operation.ASSIGN, Operation.TRANSITION})
_DRIVER_OPERATIONS = frozenset({Operation.VIEW, Operation.TRANSITION})
_OWNER_OPERATIONS = frozenset({Operation.VIEW})


def allowed_operations(role: UserRole, caller_id: str, delivery) -> frozenset[Operation]:
    if role == UserRole.ADMIN:
        return _ADMIN_OPERATIONS
    if role == UserRole.DRIVER and delivery.is_assigned_to(caller_id):
        return _DRIVER_OPERATIONS
    if role == UserRole.BUSINESS_USER and str(delivery.owner_id) == str(caller_id):
        return _OWNER_OPERATIONS
    return frozenset()


def is_allowed(caller: Caller, operation: Operation, delivery) -> bool:
    return operation in allowed_operations(caller.role, caller.user_id, delivery)


def can_create(role: UserRole) -> bool:
    """Only business users open deliveries; they become the owner."""
    return role == UserRole.BUSINESS_USER


def verify_caller(caller: Caller):
    """Reject callers the directory does not know, or whose claimed role differs."""
    try:
        user = find_by_id(caller.user_id)
    except NotFound as exc:
        raise Forbidden("caller_registered", f"Caller {caller.user_id} is not a registered user") from exc
    if not user.has_role(caller.role):
        raise Forbidden(
            "caller_role_matches",
            f"Caller {caller.user_id} does not hold the {caller.role.value} role",
        )
    return user
