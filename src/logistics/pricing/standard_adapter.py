"""Standard tariff — flat base fee plus a per-weight rate, scaled by priority."""

from decimal import ROUND_HALF_UP, Decimal

from logistics.pricing.port import PriceQuote, PricingPort

BASE_FEE = Decimal("50")
RATE_PER_WEIGHT_UNIT = Decimal("10")
PRIORITY_MULTIPLIERS = {
    "HIGH": Decimal("1.5"),
    "MEDIUM": Decimal("1.2"),
    "LOW": Decimal("1"),
}


class StandardTariff(PricingPort):
    def quote(self, weight: float, priority: str) -> PriceQuote:
        multiplier = PRIORITY_MULTIPLIERS.get(priority, Decimal("1"))
        total = (BASE_FEE + Decimal(str(weight)) * RATE_PER_WEIGHT_UNIT) * multiplier
        return PriceQuote(estimated_cost=float(total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)))
