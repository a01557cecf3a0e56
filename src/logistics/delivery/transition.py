"""Lifecycle Engine — move a delivery along its state machine.

The assigned driver reports progress; an administrator may drive any
transition. Business users never change a delivery's status, not even on
deliveries they own.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from logistics.delivery.authorization import Caller, Operation, is_allowed, verify_caller
from logistics.delivery.concurrency import check_expected_revision
from logistics.delivery.delivery import Delivery, DeliveryStatus
from logistics.domain import logistics
from logistics.errors import Forbidden
from logistics.user.user import UserRole
from logistics.utils.logging import get_logger

logger = get_logger(__name__)


@logistics.command(part_of="Delivery")
class TransitionStatus:
    """Request that a delivery move to ``new_status``."""

    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=UserRole)
    delivery_id = Identifier(required=True)
    new_status = String(required=True, choices=DeliveryStatus)
    actual_km = Float(min_value=0.0)
    actual_cost = Float(min_value=0.0)
    expected_revision = Integer(min_value=0)


@logistics.command_handler(part_of=Delivery)
class TransitionStatusHandler:
    @handle(TransitionStatus)
    def transition_status(self, command):
        caller = Caller.of(command.caller_id, command.caller_role)
        verify_caller(caller)

        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        if not is_allowed(caller, Operation.TRANSITION, delivery):
            raise Forbidden(
                "transition_by_assigned_driver_or_admin",
                "Only the assigned driver or an administrator can change the delivery status",
            )

        check_expected_revision(delivery, command.expected_revision)
        loaded_revision = delivery.revision
        previous = delivery.status
        delivery.transition_to(
            DeliveryStatus(command.new_status),
            changed_by=caller.user_id,
            actual_km=command.actual_km,
            actual_cost=command.actual_cost,
        )
        repo.save_change(delivery, loaded_revision)

        logger.info(
            "Delivery status changed",
            delivery_id=str(delivery.id),
            previous_status=previous,
            new_status=delivery.status,
            caller_id=caller.user_id,
            revision=delivery.revision,
        )
        return str(delivery.id)
