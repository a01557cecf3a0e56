"""Delivery aggregate (CQRS) — the core of the logistics domain.

A delivery is a single transport job from a pickup address to a drop address,
owned by the business user who requested it. Administrators bind a driver to
it while it is still pending; the driver then accepts it and reports progress
until it is delivered. Either side may cancel it before it is delivered.

State Machine:
    PENDING → ACCEPTED → ON_WAY → DELIVERED
    {PENDING, ACCEPTED, ON_WAY} → CANCELLED
    DELIVERED, CANCELLED → (terminal)

Driver assignment does not change the status. Only a pending delivery can be
(re)assigned; once accepted the driver is fixed.
"""

import math
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from logistics.delivery.events import (
    DeliveryCompleted,
    DeliveryCostEstimated,
    DeliveryCreated,
    DeliveryStatusChanged,
    DriverAssigned,
)
from logistics.domain import logistics
from logistics.errors import InvalidTransition, PreconditionFailed
from logistics.shared.phone import is_dialable


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class DeliveryStatus(Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    ON_WAY = "ON_WAY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class DeliveryPriority(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


TRANSITIONS: dict[DeliveryStatus, frozenset[DeliveryStatus]] = {
    DeliveryStatus.PENDING: frozenset({DeliveryStatus.ACCEPTED, DeliveryStatus.CANCELLED}),
    DeliveryStatus.ACCEPTED: frozenset({DeliveryStatus.ON_WAY, DeliveryStatus.CANCELLED}),
    DeliveryStatus.ON_WAY: frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED}),
    DeliveryStatus.DELIVERED: frozenset(),  # terminal
    DeliveryStatus.CANCELLED: frozenset(),  # terminal
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)

# Statuses that can only be reached by a delivery with a driver bound to it
DRIVER_REQUIRED_STATUSES = frozenset(
    {DeliveryStatus.ACCEPTED, DeliveryStatus.ON_WAY, DeliveryStatus.DELIVERED}
)


def parse_status(value: str | DeliveryStatus) -> DeliveryStatus:
    """Coerce a raw status into the closed set, rejecting anything else."""
    if isinstance(value, DeliveryStatus):
        return value
    try:
        return DeliveryStatus(value)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in DeliveryStatus)
        raise ValidationError({"status": [f"Unknown status {value!r}; expected one of {allowed}"]}) from exc


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@logistics.aggregate
class Delivery:
    owner_id = Identifier(required=True)
    driver_id = Identifier()
    customer_name = String(required=True, max_length=255)
    customer_phone = String(required=True, max_length=20)
    pickup_address = String(required=True, max_length=500)
    drop_address = String(required=True, max_length=500)
    weight = Float(required=True)
    priority = String(choices=DeliveryPriority, default=DeliveryPriority.MEDIUM.value)
    notes = String(max_length=1000)
    status = String(choices=DeliveryStatus, default=DeliveryStatus.PENDING.value)
    estimated_cost = Float(min_value=0.0)
    estimated_km = Float(min_value=0.0)
    actual_km = Float(min_value=0.0)
    actual_cost = Float(min_value=0.0)
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def weight_must_be_positive(self):
        if self.weight is not None and (not math.isfinite(self.weight) or self.weight <= 0):
            raise ValidationError({"weight": ["Weight must be a finite number greater than zero"]})

    @invariant.post
    def amounts_must_be_finite(self):
        for field_name in ("estimated_cost", "estimated_km", "actual_km", "actual_cost"):
            value = getattr(self, field_name)
            if value is not None and not math.isfinite(value):
                raise ValidationError({field_name: ["Must be a finite number"]})

    @invariant.post
    def addresses_and_recipient_must_not_be_blank(self):
        for field_name in ("pickup_address", "drop_address", "customer_name"):
            value = getattr(self, field_name)
            if value is not None and not value.strip():
                raise ValidationError({field_name: ["Must not be blank"]})

    @invariant.post
    def customer_phone_must_be_dialable(self):
        if self.customer_phone and not is_dialable(self.customer_phone):
            raise ValidationError({"customer_phone": [f"Invalid phone number: {self.customer_phone!r}"]})

    @invariant.post
    def claimed_delivery_must_have_driver(self):
        if self.status in {s.value for s in DRIVER_REQUIRED_STATUSES} and not self.driver_id:
            raise ValidationError({"driver_id": [f"A {self.status} delivery must have a driver"]})

    @invariant.post
    def actuals_only_when_delivered(self):
        if self.status != DeliveryStatus.DELIVERED.value and (
            self.actual_km is not None or self.actual_cost is not None
        ):
            raise ValidationError({"actuals": ["Actual distance and cost are recorded only on delivery"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        owner_id: str,
        customer_name: str,
        customer_phone: str,
        pickup_address: str,
        drop_address: str,
        weight: float,
        priority: str | None = None,
        notes: str | None = None,
    ):
        """Open a new pending delivery for a business user."""
        now = datetime.now(UTC)
        delivery = cls(
            owner_id=owner_id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            pickup_address=pickup_address,
            drop_address=drop_address,
            weight=weight,
            priority=priority or DeliveryPriority.MEDIUM.value,
            notes=notes,
            status=DeliveryStatus.PENDING.value,
            revision=0,
            created_at=now,
            updated_at=now,
        )
        delivery.raise_(
            DeliveryCreated(
                delivery_id=str(delivery.id),
                owner_id=str(owner_id),
                customer_name=customer_name,
                pickup_address=pickup_address,
                drop_address=drop_address,
                weight=weight,
                priority=delivery.priority,
                created_at=now,
            )
        )
        return delivery

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> DeliveryStatus:
        return DeliveryStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATUSES

    def is_assigned_to(self, driver_id: str) -> bool:
        return self.driver_id is not None and str(self.driver_id) == str(driver_id)

    def can_transition_to(self, target: DeliveryStatus) -> bool:
        return target in TRANSITIONS[self.current_status]

    def _touch(self, now: datetime) -> None:
        self.updated_at = now
        self.revision = (self.revision or 0) + 1

    # -------------------------------------------------------------------
    # Costs
    # -------------------------------------------------------------------
    def record_estimate(self, estimated_cost: float, estimated_km: float | None = None) -> None:
        """Store the pricing collaborator's quote. Recorded at most once."""
        if self.is_terminal:
            raise InvalidTransition(
                "estimate_before_terminal",
                f"Cannot record an estimate on a {self.status} delivery",
            )
        if self.estimated_cost is not None:
            raise PreconditionFailed(
                "estimate_recorded_once",
                f"Delivery {self.id} already has an estimated cost",
            )

        now = datetime.now(UTC)
        self.estimated_cost = estimated_cost
        self.estimated_km = estimated_km
        self._touch(now)
        self.raise_(
            DeliveryCostEstimated(
                delivery_id=str(self.id),
                estimated_cost=estimated_cost,
                estimated_km=estimated_km,
                estimated_at=now,
            )
        )

    def _record_actuals(self, actual_km: float | None, actual_cost: float | None) -> None:
        # Only reachable from the DELIVERED transition, inside its atomic change.
        if self.actual_km is not None or self.actual_cost is not None:
            raise InvalidTransition("actuals_immutable", "Actual distance and cost are already recorded")
        self.actual_km = actual_km
        self.actual_cost = actual_cost

    # -------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------
    def assign_driver(self, driver_id: str, assigned_by: str) -> None:
        """Bind a driver to a pending delivery, replacing any earlier driver."""
        if self.current_status != DeliveryStatus.PENDING:
            raise InvalidTransition(
                "assign_only_while_pending",
                f"Cannot assign a driver to a {self.status} delivery; it has already been claimed",
            )

        now = datetime.now(UTC)
        previous_driver_id = str(self.driver_id) if self.driver_id else None
        self.driver_id = driver_id
        self._touch(now)
        self.raise_(
            DriverAssigned(
                delivery_id=str(self.id),
                driver_id=str(driver_id),
                previous_driver_id=previous_driver_id,
                assigned_by=str(assigned_by),
                assigned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def transition_to(
        self,
        target: DeliveryStatus,
        changed_by: str,
        actual_km: float | None = None,
        actual_cost: float | None = None,
    ) -> None:
        """Move the delivery along one edge of the state machine."""
        current = self.current_status
        if not self.can_transition_to(target):
            raise InvalidTransition(
                "permitted_edge",
                f"Cannot transition from {current.value} to {target.value}",
            )
        if target in DRIVER_REQUIRED_STATUSES and not self.driver_id:
            raise PreconditionFailed(
                "driver_assigned",
                f"A driver must be assigned before the delivery can become {target.value}",
            )
        if target != DeliveryStatus.DELIVERED and (actual_km is not None or actual_cost is not None):
            raise ValidationError({"actuals": ["Actual distance and cost can only accompany DELIVERED"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            if target == DeliveryStatus.DELIVERED:
                self._record_actuals(actual_km, actual_cost)
            self._touch(now)

        self.raise_(
            DeliveryStatusChanged(
                delivery_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_by=str(changed_by),
                changed_at=now,
            )
        )
        if target == DeliveryStatus.DELIVERED:
            self.raise_(
                DeliveryCompleted(
                    delivery_id=str(self.id),
                    driver_id=str(self.driver_id),
                    actual_km=actual_km,
                    actual_cost=actual_cost,
                    delivered_at=now,
                )
            )
