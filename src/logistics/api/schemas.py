"""Pydantic request/response schemas for the Logistics API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Request Schemas ---


class RegisterUserRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "dispatch@acme-freight.example",
                    "full_name": "Acme Freight Dispatch",
                    "role": "BUSINESS_USER",
                    "phone_number": "+1-555-0100",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    full_name: str = Field(..., max_length=255)
    role: str
    phone_number: str | None = Field(None, max_length=20)


class CreateDeliveryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Jane Doe",
                    "customer_phone": "+1-555-0123",
                    "pickup_address": "12 Dock Road, Springfield",
                    "drop_address": "400 Elm Street, Shelbyville",
                    "weight": 12.5,
                    "priority": "HIGH",
                    "notes": "Ring the bell twice",
                }
            ]
        }
    }

    customer_name: str = Field(..., max_length=255)
    customer_phone: str = Field(..., max_length=20)
    pickup_address: str = Field(..., max_length=500)
    drop_address: str = Field(..., max_length=500)
    weight: float
    priority: str | None = None
    notes: str | None = Field(None, max_length=1000)


class AssignDriverRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"driver_id": "drv-001", "expected_revision": 1}]}}

    driver_id: str
    expected_revision: int | None = None


class TransitionStatusRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {"status": "ON_WAY"},
                {"status": "DELIVERED", "actual_km": 14.2, "actual_cost": 230.0},
            ]
        }
    }

    status: str
    actual_km: float | None = None
    actual_cost: float | None = None
    expected_revision: int | None = None


# --- Response Schemas ---


class UserResponse(BaseModel):
    user_id: str
    email: str
    full_name: str
    phone_number: str | None = None
    role: str
    registered_at: datetime | None = None

    @classmethod
    def from_user(cls, user) -> UserResponse:
        return cls(
            user_id=str(user.id),
            email=user.email.address,
            full_name=user.full_name,
            phone_number=user.phone_number.number if user.phone_number else None,
            role=user.role,
            registered_at=user.registered_at,
        )


class DeliveryResponse(BaseModel):
    delivery_id: str
    owner_id: str
    driver_id: str | None = None
    customer_name: str
    customer_phone: str
    pickup_address: str
    drop_address: str
    weight: float
    priority: str
    notes: str | None = None
    status: str
    estimated_cost: float | None = None
    estimated_km: float | None = None
    actual_km: float | None = None
    actual_cost: float | None = None
    revision: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_delivery(cls, delivery) -> DeliveryResponse:
        return cls(
            delivery_id=str(delivery.id),
            owner_id=str(delivery.owner_id),
            driver_id=str(delivery.driver_id) if delivery.driver_id else None,
            customer_name=delivery.customer_name,
            customer_phone=delivery.customer_phone,
            pickup_address=delivery.pickup_address,
            drop_address=delivery.drop_address,
            weight=delivery.weight,
            priority=delivery.priority,
            notes=delivery.notes,
            status=delivery.status,
            estimated_cost=delivery.estimated_cost,
            estimated_km=delivery.estimated_km,
            actual_km=delivery.actual_km,
            actual_cost=delivery.actual_cost,
            revision=delivery.revision,
            created_at=delivery.created_at,
            updated_at=delivery.updated_at,
        )


class StatusHistoryResponse(BaseModel):
    previous_status: str | None = None
    new_status: str
    changed_by: str
    changed_at: datetime
