"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
(EmailAddress VO, dialable phone numbers, positive weight) and match the
exact field names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

PRIORITIES = ["LOW", "MEDIUM", "HIGH"]

# ---------- Users ----------


def valid_email() -> str:
    """Generate emails that pass EmailAddress VO validation.

    Rules: exactly one @, valid domain with dot, no leading/trailing dots,
    no consecutive dots. A random suffix keeps them unique across users.
    """
    local = fake.user_name()[:20].strip(".")
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:6]}@{domain}"


def valid_phone() -> str:
    """Generate phones matching the dialable pattern: ^\\+?[\\d\\s\\-()]+$"""
    area = random.randint(200, 999)
    prefix = random.randint(200, 999)
    line = random.randint(1000, 9999)
    return f"+1-{area}-{prefix}-{line}"


def user_data(role: str) -> dict:
    """Generate a RegisterUserRequest payload for ``role``."""
    return {
        "email": valid_email(),
        "full_name": fake.name()[:255],
        "role": role,
        "phone_number": valid_phone(),
    }


# ---------- Deliveries ----------


def delivery_data() -> dict:
    """Generate a CreateDeliveryRequest payload."""
    return {
        "customer_name": fake.name()[:255],
        "customer_phone": valid_phone(),
        "pickup_address": fake.address().replace("\n", ", ")[:500],
        "drop_address": fake.address().replace("\n", ", ")[:500],
        "weight": round(random.uniform(0.5, 40.0), 1),
        "priority": random.choice(PRIORITIES),
        "notes": fake.sentence() if random.random() < 0.3 else None,
    }


def delivered_actuals() -> dict:
    """Distance and cost reported by a driver at handover."""
    return {
        "actual_km": round(random.uniform(1.0, 80.0), 1),
        "actual_cost": round(random.uniform(60.0, 900.0), 2),
    }
