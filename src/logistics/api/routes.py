"""FastAPI routes for the Logistics domain.

Authentication happens upstream; the acting user arrives in the
``X-Caller-Id`` and ``X-Caller-Role`` headers and is checked against the
identity directory by every delivery operation.
"""

from fastapi import APIRouter, Depends, Header

from logistics.api.schemas import (
    AssignDriverRequest,
    CreateDeliveryRequest,
    DeliveryResponse,
    RegisterUserRequest,
    StatusHistoryResponse,
    TransitionStatusRequest,
    UserResponse,
)
from logistics.delivery import intents
from logistics.delivery.authorization import Caller
from logistics.user.directory import find_by_id, list_by_role
from logistics.user.registration import register_user


async def current_caller(
    x_caller_id: str = Header(...),
    x_caller_role: str = Header(...),
) -> Caller:
    return Caller.of(x_caller_id, x_caller_role)


# ---------------------------------------------------------------------------
# Delivery Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@delivery_router.post("", status_code=201, response_model=DeliveryResponse)
async def create_delivery(body: CreateDeliveryRequest, caller: Caller = Depends(current_caller)) -> DeliveryResponse:
    """Open a new pending delivery. Business users only."""
    delivery = intents.create_delivery(
        caller,
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        pickup_address=body.pickup_address,
        drop_address=body.drop_address,
        weight=body.weight,
        priority=body.priority,
        notes=body.notes,
    )
    return DeliveryResponse.from_delivery(delivery)


@delivery_router.get("", response_model=list[DeliveryResponse])
async def list_deliveries(unassigned: bool = False, caller: Caller = Depends(current_caller)) -> list[DeliveryResponse]:
    """Deliveries visible to the caller: all for admins, own for business users, assigned for drivers."""
    deliveries = intents.list_deliveries(caller, unassigned_only=unassigned)
    return [DeliveryResponse.from_delivery(d) for d in deliveries]


@delivery_router.get("/{delivery_id}", response_model=DeliveryResponse)
async def get_delivery(delivery_id: str, caller: Caller = Depends(current_caller)) -> DeliveryResponse:
    return DeliveryResponse.from_delivery(intents.get_delivery(caller, delivery_id))


@delivery_router.put("/{delivery_id}/driver", response_model=DeliveryResponse)
async def assign_driver(
    delivery_id: str,
    body: AssignDriverRequest,
    caller: Caller = Depends(current_caller),
) -> DeliveryResponse:
    """Bind a driver to a pending delivery. Administrators only."""
    delivery = intents.assign_driver(
        caller,
        delivery_id,
        body.driver_id,
        expected_revision=body.expected_revision,
    )
    return DeliveryResponse.from_delivery(delivery)


@delivery_router.put("/{delivery_id}/status", response_model=DeliveryResponse)
async def transition_status(
    delivery_id: str,
    body: TransitionStatusRequest,
    caller: Caller = Depends(current_caller),
) -> DeliveryResponse:
    """Move the delivery along its state machine."""
    delivery = intents.transition_status(
        caller,
        delivery_id,
        body.status,
        actual_km=body.actual_km,
        actual_cost=body.actual_cost,
        expected_revision=body.expected_revision,
    )
    return DeliveryResponse.from_delivery(delivery)


@delivery_router.get("/{delivery_id}/history", response_model=list[StatusHistoryResponse])
async def status_history(delivery_id: str, caller: Caller = Depends(current_caller)) -> list[StatusHistoryResponse]:
    entries = intents.status_history(caller, delivery_id)
    return [
        StatusHistoryResponse(
            previous_status=entry.previous_status,
            new_status=entry.new_status,
            changed_by=str(entry.changed_by),
            changed_at=entry.changed_at,
        )
        for entry in entries
    ]


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserResponse)
async def register(body: RegisterUserRequest) -> UserResponse:
    user = register_user(
        email=body.email,
        full_name=body.full_name,
        role=body.role,
        phone_number=body.phone_number,
    )
    return UserResponse.from_user(user)


@user_router.get("", response_model=list[UserResponse])
async def list_users(role: str) -> list[UserResponse]:
    """Users holding ``role``; ``?role=DRIVER`` feeds the assignment picker."""
    return [UserResponse.from_user(u) for u in list_by_role(role)]


@user_router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str) -> UserResponse:
    return UserResponse.from_user(find_by_id(user_id))
