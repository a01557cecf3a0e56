"""Delivery creation — command and handler.

The pricing collaborator's quote, if it has one, is recorded in the same unit
of work as the new delivery.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from logistics.delivery.authorization import Caller, can_create, verify_caller
from logistics.delivery.delivery import Delivery, DeliveryPriority
from logistics.domain import logistics
from logistics.errors import Forbidden
from logistics.pricing import get_pricer
from logistics.user.user import UserRole
from logistics.utils.logging import get_logger

logger = get_logger(__name__)


@logistics.command(part_of="Delivery")
class CreateDelivery:
    """Open a new pending delivery on behalf of a business user."""

    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=UserRole)
    customer_name = String(required=True, max_length=255)
    customer_phone = String(required=True, max_length=20)
    pickup_address = String(required=True, max_length=500)
    drop_address = String(required=True, max_length=500)
    weight = Float(required=True)
    priority = String(choices=DeliveryPriority, default=DeliveryPriority.MEDIUM.value)
    notes = String(max_length=1000)


@logistics.command_handler(part_of=Delivery)
class CreateDeliveryHandler:
    @handle(CreateDelivery)
    def create_delivery(self, command):
        caller = Caller.of(command.caller_id, command.caller_role)
        verify_caller(caller)
        if not can_create(caller.role):
            raise Forbidden("create_as_business_user", "Only business users can create deliveries")

        delivery = Delivery.create(
            owner_id=caller.user_id,
            customer_name=command.customer_name,
            customer_phone=command.customer_phone,
            pickup_address=command.pickup_address,
            drop_address=command.drop_address,
            weight=command.weight,
            priority=command.priority,
            notes=command.notes,
        )

        quote = get_pricer().quote(delivery.weight, delivery.priority)
        if quote is not None:
            delivery.record_estimate(quote.estimated_cost, quote.estimated_km)

        current_domain.repository_for(Delivery).add(delivery)
        logger.info(
            "Delivery created",
            delivery_id=str(delivery.id),
            owner_id=caller.user_id,
            estimated_cost=delivery.estimated_cost,
        )
        return str(delivery.id)
