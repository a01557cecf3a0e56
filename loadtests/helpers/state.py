"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass


@dataclass
class Crew:
    """The three participants one simulated journey acts as."""

    admin_id: str | None = None
    business_id: str | None = None
    driver_id: str | None = None


@dataclass
class DeliveryState:
    """Tracks state for a single simulated delivery lifecycle."""

    delivery_id: str | None = None
    revision: int = 0
    current_status: str = "PENDING"
