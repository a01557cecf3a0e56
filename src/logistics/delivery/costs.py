"""Cost Recorder — deferred estimates from an external pricing collaborator.

Estimates quoted at creation are recorded by the creation handler. This command
covers pricers that answer later; an estimate is recorded at most once.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from logistics.delivery.concurrency import check_expected_revision
from logistics.delivery.delivery import Delivery
from logistics.domain import logistics
from logistics.utils.logging import get_logger

logger = get_logger(__name__)


@logistics.command(part_of="Delivery")
class RecordCostEstimate:
    """Store the pricer's quote on a delivery that has none yet."""

    delivery_id = Identifier(required=True)
    estimated_cost = Float(required=True, min_value=0.0)
    estimated_km = Float(min_value=0.0)
    expected_revision = Integer(min_value=0)


@logistics.command_handler(part_of=Delivery)
class RecordCostEstimateHandler:
    @handle(RecordCostEstimate)
    def record_cost_estimate(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        check_expected_revision(delivery, command.expected_revision)
        loaded_revision = delivery.revision
        delivery.record_estimate(command.estimated_cost, command.estimated_km)
        repo.save_change(delivery, loaded_revision)
        logger.info(
            "Cost estimate recorded",
            delivery_id=str(delivery.id),
            estimated_cost=command.estimated_cost,
        )
        return str(delivery.id)
