"""Delivery Store — the only mutable shared resource of the logistics context.

Every mutation goes through one aggregate load, mutate, ``save_change`` cycle
inside a Protean unit of work, so a rejected intent never leaves a partial
write behind. ``save_change`` is a compare-and-swap on ``revision``: of two
writers that loaded the same revision, exactly one succeeds and the other gets
``Conflict``.
"""

from protean.core.repository import BaseRepository
from protean.exceptions import ObjectNotFoundError
from protean.port.provider import DatabaseCapabilities
from protean.utils.query import Q

from logistics.delivery.concurrency import get_claims
from logistics.delivery.delivery import Delivery, DeliveryStatus
from logistics.domain import logistics
from logistics.errors import Conflict, NotFound


def _newest_first(deliveries: list[Delivery]) -> list[Delivery]:
    return sorted(deliveries, key=lambda d: d.created_at, reverse=True)


@logistics.repository(part_of=Delivery)
class DeliveryRepository:
    def get(self, identifier) -> Delivery:
        try:
            return BaseRepository.get(self, identifier)
        except ObjectNotFoundError as exc:
            raise NotFound("delivery_exists", f"Delivery {identifier} does not exist") from exc

    def revision_of(self, identifier) -> int | None:
        """Current revision of a delivery, or ``None`` if there is no such delivery."""
        found = self._dao.query.filter(id=str(identifier)).all().items
        return found[0].revision if found else None

    def save_change(self, delivery: Delivery, loaded_revision: int) -> Delivery:
        """Persist ``delivery`` only if storage still holds ``loaded_revision``.

        The swap itself is a conditional update, the same claim Protean's outbox
        uses: a transactional store serializes the two writers and the loser's
        ``WHERE revision = loaded`` matches no row. The in-memory store works on
        a private copy per unit of work, so the revision is claimed in-process
        as well.
        """
        transactional = self._provider.has_capability(DatabaseCapabilities.TRANSACTIONS)
        claims = get_claims()
        previous = None
        if not transactional:
            previous = claims.claim(delivery.id, loaded_revision, delivery.revision)

        try:
            swapped = self._dao._update_all(
                Q(id=str(delivery.id), revision=loaded_revision),
                revision=delivery.revision,
            )
            if not swapped:
                raise Conflict(
                    "revision_current",
                    f"Delivery {delivery.id} changed after it was read at revision {loaded_revision}",
                )
            return self.add(delivery)
        except Exception:
            if not transactional:
                claims.release(delivery.id, delivery.revision, previous)
            raise

    def list_all(self) -> list[Delivery]:
        return _newest_first(self._dao.query.all().items)

    def list_by_owner(self, owner_id: str) -> list[Delivery]:
        return _newest_first(self._dao.query.filter(owner_id=str(owner_id)).all().items)

    def list_by_driver(self, driver_id: str) -> list[Delivery]:
        return _newest_first(self._dao.query.filter(driver_id=str(driver_id)).all().items)

    def list_unassigned(self) -> list[Delivery]:
        """Pending deliveries still waiting for an administrator to pick a driver."""
        pending = self._dao.query.filter(status=DeliveryStatus.PENDING.value).all().items
        return _newest_first([d for d in pending if not d.driver_id])
