"""Pricing adapter that never quotes; estimates are recorded later, if at all."""

from logistics.pricing.port import PriceQuote, PricingPort


class NoPricing(PricingPort):
    def quote(self, weight: float, priority: str) -> PriceQuote | None:
        return None
