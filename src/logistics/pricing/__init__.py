"""Pricing adapter abstraction — pluggable cost estimation for new deliveries."""

import os

_pricer_instance = None


def get_pricer():
    """Return the configured pricing adapter (singleton).

    Uses the standard tariff by default. Set PRICING_ADAPTER=none to leave
    estimates absent, e.g. when an external pricer records them later.
    """
    global _pricer_instance
    if _pricer_instance is None:
        adapter = os.environ.get("PRICING_ADAPTER", "standard")
        if adapter == "standard":
            from logistics.pricing.standard_adapter import StandardTariff

            _pricer_instance = StandardTariff()
        elif adapter == "none":
            from logistics.pricing.null_adapter import NoPricing

            _pricer_instance = NoPricing()
        else:
            raise ValueError(f"Unknown pricing adapter: {adapter}")
    return _pricer_instance


def reset_pricer():
    """Reset the pricing singleton (useful for testing)."""
    global _pricer_instance
    _pricer_instance = None
