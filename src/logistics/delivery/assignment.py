"""Assignment Coordinator — bind a driver to a pending delivery.

Only administrators assign. A pending delivery can be reassigned any number of
times; each assignment fully replaces the previous driver. Once the driver has
accepted the delivery, the assignment is fixed.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from logistics.delivery.authorization import Caller, Operation, is_allowed, verify_caller
from logistics.delivery.concurrency import check_expected_revision
from logistics.delivery.delivery import Delivery
from logistics.domain import logistics
from logistics.errors import Forbidden, PreconditionFailed
from logistics.user.directory import find_by_id
from logistics.user.user import UserRole
from logistics.utils.logging import get_logger

logger = get_logger(__name__)


@logistics.command(part_of="Delivery")
class AssignDriver:
    """Bind ``driver_id`` to a pending delivery."""

    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=UserRole)
    delivery_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    expected_revision = Integer(min_value=0)


@logistics.command_handler(part_of=Delivery)
class AssignDriverHandler:
    @handle(AssignDriver)
    def assign_driver(self, command):
        caller = Caller.of(command.caller_id, command.caller_role)
        verify_caller(caller)
        # Role alone decides assignment rights, so it is checked before any lookup
        if caller.role != UserRole.ADMIN:
            raise Forbidden("assign_as_admin", "Only administrators can assign drivers")

        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        if not is_allowed(caller, Operation.ASSIGN, delivery):
            raise Forbidden("assign_as_admin", "Only administrators can assign drivers")

        driver = find_by_id(command.driver_id)
        if not driver.has_role(UserRole.DRIVER):
            raise PreconditionFailed(
                "assignee_is_driver",
                f"User {command.driver_id} is a {driver.role}, not a DRIVER",
            )

        check_expected_revision(delivery, command.expected_revision)
        loaded_revision = delivery.revision
        delivery.assign_driver(str(driver.id), assigned_by=caller.user_id)
        repo.save_change(delivery, loaded_revision)

        logger.info(
            "Driver assigned",
            delivery_id=str(delivery.id),
            driver_id=str(driver.id),
            caller_id=caller.user_id,
            revision=delivery.revision,
        )
        return str(delivery.id)
