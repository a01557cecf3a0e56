"""Delivery status history — append-only audit trail of every status change."""

import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from logistics.delivery.delivery import Delivery
from logistics.delivery.events import DeliveryCreated, DeliveryStatusChanged
from logistics.domain import logistics


@logistics.projection
class StatusHistoryEntry:
    entry_id = Identifier(identifier=True, required=True)
    delivery_id = Identifier(required=True)
    previous_status = String()
    new_status = String(required=True)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)


def history_for(delivery_id: str) -> list[StatusHistoryEntry]:
    """Entries for one delivery, oldest first."""
    repo = current_domain.repository_for(StatusHistoryEntry)
    entries = repo._dao.query.filter(delivery_id=str(delivery_id)).all().items
    return sorted(entries, key=lambda e: e.changed_at)


def _add_entry(delivery_id, previous_status, new_status, changed_by, changed_at):
    current_domain.repository_for(StatusHistoryEntry).add(
        StatusHistoryEntry(
            entry_id=str(uuid.uuid4()),
            delivery_id=delivery_id,
            previous_status=previous_status,
            new_status=new_status,
            changed_by=changed_by,
            changed_at=changed_at,
        )
    )


@logistics.projector(projector_for=StatusHistoryEntry, aggregates=[Delivery])
class StatusHistoryProjector:
    @on(DeliveryCreated)
    def on_delivery_created(self, event):
        _add_entry(event.delivery_id, None, "PENDING", event.owner_id, event.created_at)

    @on(DeliveryStatusChanged)
    def on_delivery_status_changed(self, event):
        _add_entry(
            event.delivery_id,
            event.previous_status,
            event.new_status,
            event.changed_by,
            event.changed_at,
        )
