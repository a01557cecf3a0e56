"""Intent boundary — the operations external callers issue against deliveries.

Every function takes the acting ``Caller`` explicitly. Mutating intents are
serialized per delivery, dispatched as Protean commands inside one unit of
work, and retried only on transient storage errors. Each mutation is a
compare-and-swap against the revision the intent started from, unless the
caller names one, and returns the record as committed.
"""

from contextlib import nullcontext

from protean.utils.globals import current_domain

from logistics.delivery.assignment import AssignDriver
from logistics.delivery.authorization import Caller, Operation, is_allowed, verify_caller
from logistics.delivery.concurrency import get_guard, with_storage_retries
from logistics.delivery.costs import RecordCostEstimate
from logistics.delivery.creation import CreateDelivery
from logistics.delivery.delivery import Delivery, DeliveryStatus, parse_status
from logistics.delivery.transition import TransitionStatus
from logistics.errors import Forbidden, LifecycleError
from logistics.projections.status_history import StatusHistoryEntry, history_for
from logistics.user.user import UserRole
from logistics.utils.logging import bound_caller, get_logger

logger = get_logger(__name__)


def _caller_logged(caller: Caller | None):
    if caller is None:
        return nullcontext()
    return bound_caller(caller.user_id, caller.role.value)


def _dispatch(command, intent: str, caller: Caller | None = None, delivery_id: str | None = None) -> str:
    with _caller_logged(caller):
        try:
            return with_storage_retries(lambda: current_domain.process(command, asynchronous=False), intent)
        except LifecycleError as exc:
            logger.info(
                "Intent rejected",
                intent=intent,
                delivery_id=delivery_id,
                code=exc.code,
                rule=exc.rule,
            )
            raise


def _mutate(
    delivery_id: str,
    build_command,
    intent: str,
    caller: Caller | None = None,
    expected_revision: int | None = None,
) -> Delivery:
    repo = current_domain.repository_for(Delivery)
    with get_guard().hold(delivery_id):
        if expected_revision is None:
            # Pinned once, so a retried attempt never lands on top of someone else's write
            expected_revision = repo.revision_of(delivery_id)
        _dispatch(build_command(expected_revision), intent, caller, delivery_id=str(delivery_id))
        return repo.get(delivery_id)


def _viewable(caller: Caller, delivery_id: str) -> Delivery:
    delivery = current_domain.repository_for(Delivery).get(delivery_id)
    if not is_allowed(caller, Operation.VIEW, delivery):
        raise Forbidden("view_own_or_assigned", f"Caller {caller.user_id} cannot view delivery {delivery_id}")
    return delivery


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def create_delivery(
    caller: Caller,
    *,
    customer_name: str,
    customer_phone: str,
    pickup_address: str,
    drop_address: str,
    weight: float,
    priority: str | None = None,
    notes: str | None = None,
) -> Delivery:
    command = CreateDelivery(
        caller_id=caller.user_id,
        caller_role=caller.role.value,
        customer_name=customer_name,
        customer_phone=customer_phone,
        pickup_address=pickup_address,
        drop_address=drop_address,
        weight=weight,
        notes=notes,
        **({"priority": priority} if priority else {}),
    )
    # A new delivery has no identity yet, so there is nothing to serialize on.
    delivery_id = _dispatch(command, "create_delivery", caller)
    return current_domain.repository_for(Delivery).get(delivery_id)


def assign_driver(
    caller: Caller,
    delivery_id: str,
    driver_id: str,
    expected_revision: int | None = None,
) -> Delivery:
    def build(revision):
        return AssignDriver(
            caller_id=caller.user_id,
            caller_role=caller.role.value,
            delivery_id=delivery_id,
            driver_id=driver_id,
            expected_revision=revision,
        )

    return _mutate(delivery_id, build, "assign_driver", caller, expected_revision)


def transition_status(
    caller: Caller,
    delivery_id: str,
    new_status: str | DeliveryStatus,
    actual_km: float | None = None,
    actual_cost: float | None = None,
    expected_revision: int | None = None,
) -> Delivery:
    target = parse_status(new_status)

    def build(revision):
        return TransitionStatus(
            caller_id=caller.user_id,
            caller_role=caller.role.value,
            delivery_id=delivery_id,
            new_status=target.value,
            actual_km=actual_km,
            actual_cost=actual_cost,
            expected_revision=revision,
        )

    return _mutate(delivery_id, build, "transition_status", caller, expected_revision)


def record_estimate(delivery_id: str, estimated_cost: float, estimated_km: float | None = None) -> Delivery:
    """Entry point for a pricing collaborator that quotes after creation."""

    def build(revision):
        return RecordCostEstimate(
            delivery_id=delivery_id,
            estimated_cost=estimated_cost,
            estimated_km=estimated_km,
            expected_revision=revision,
        )

    return _mutate(delivery_id, build, "record_estimate")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def list_deliveries(caller: Caller, unassigned_only: bool = False) -> list[Delivery]:
    verify_caller(caller)
    repo = current_domain.repository_for(Delivery)

    if caller.role == UserRole.ADMIN:
        return repo.list_unassigned() if unassigned_only else repo.list_all()
    if unassigned_only:
        raise Forbidden("list_unassigned_as_admin", "Only administrators can list unassigned deliveries")
    if caller.role == UserRole.BUSINESS_USER:
        return repo.list_by_owner(caller.user_id)
    return repo.list_by_driver(caller.user_id)


def get_delivery(caller: Caller, delivery_id: str) -> Delivery:
    verify_caller(caller)
    return _viewable(caller, delivery_id)


def status_history(caller: Caller, delivery_id: str) -> list[StatusHistoryEntry]:
    verify_caller(caller)
    _viewable(caller, delivery_id)
    return history_for(delivery_id)
