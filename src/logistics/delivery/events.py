"""Delivery domain events — immutable facts about delivery state changes.

All events are past tense, versioned, and carry enough data for the status
history projection and any downstream consumer.
"""

from protean.fields import DateTime, Float, Identifier, String

from logistics.domain import logistics


@logistics.event(part_of="Delivery")
class DeliveryCreated:
    """A business user requested a new delivery."""

    __version__ = "v1"

    delivery_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    customer_name = String(required=True)
    pickup_address = String(required=True)
    drop_address = String(required=True)
    weight = Float(required=True)
    priority = String(required=True)
    created_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class DeliveryCostEstimated:
    """The pricing collaborator's quote was recorded."""

    __version__ = "v1"

    delivery_id = Identifier(required=True)
    estimated_cost = Float(required=True)
    estimated_km = Float()
    estimated_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class DriverAssigned:
    """An administrator bound a driver to a pending delivery."""

    __version__ = "v1"

    delivery_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    previous_driver_id = Identifier()
    assigned_by = Identifier(required=True)
    assigned_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class DeliveryStatusChanged:
    """The delivery moved along one edge of the state machine."""

    __version__ = "v1"

    delivery_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)


@logistics.event(part_of="Delivery")
class DeliveryCompleted:
    """The assigned driver handed over the goods."""

    __version__ = "v1"

    delivery_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    actual_km = Float()
    actual_cost = Float()
    delivered_at = DateTime(required=True)
