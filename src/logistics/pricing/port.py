"""Pricing port — abstract interface for cost estimation.

The delivery core stores whatever the pricer quotes; how the figure is
computed belongs to the adapter.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PriceQuote:
    estimated_cost: float
    estimated_km: float | None = None


class PricingPort(ABC):
    """Abstract interface for pricing adapters."""

    @abstractmethod
    def quote(self, weight: float, priority: str) -> PriceQuote | None:
        """Estimate the cost of carrying ``weight`` at ``priority``.

        Returns:
            A PriceQuote, or None when no estimate is available yet.
        """
        ...
