"""
Settings for the cost engine.

Values come from the COGS dict in Django settings, falling back to the
defaults below. Settings are read on attribute access so override_settings
works in tests.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from django.conf import settings


DEFAULTS = {
    # Decimal places for aggregate costs and conversion factors
    "COST_PRECISION": 6,
    # Decimal places for ingredient and variation costs per base unit
    "UNIT_COST_PRECISION": 12,
    # Decimal places for menu prices, totals and margins
    "PRICE_PRECISION": 4,
    "DEFAULT_TARGET_MARGIN": Decimal("30"),
    # Run ingredient cascades from SupplierEntry signals through Celery
    "RUN_CASCADE_ASYNC": True,
}


class COGSSettings:
    """Lazy accessor for the COGS settings dict."""

    def __getattr__(self, name: str) -> Any:
        if name not in DEFAULTS:
            raise AttributeError(f"'COGSSettings' object has no attribute '{name}'")
        user_settings = getattr(settings, "COGS", {}) or {}
        return user_settings.get(name, DEFAULTS[name])

    def quantum(self, places: int) -> Decimal:
        """Decimal exponent for quantize() with the given number of places."""
        return Decimal(1).scaleb(-places)

    @property
    def cost_quantum(self) -> Decimal:
        return self.quantum(self.COST_PRECISION)

    @property
    def unit_cost_quantum(self) -> Decimal:
        return self.quantum(self.UNIT_COST_PRECISION)

    @property
    def price_quantum(self) -> Decimal:
        return self.quantum(self.PRICE_PRECISION)


cogs_settings = COGSSettings()


def quantize_unit_cost(value) -> Decimal:
    """Round an ingredient or variation cost per base unit for storage."""
    return Decimal(value).quantize(cogs_settings.unit_cost_quantum, rounding=ROUND_HALF_UP)


def quantize_cost(value) -> Decimal:
    """Round a recipe or product cost for storage."""
    return Decimal(value).quantize(cogs_settings.cost_quantum, rounding=ROUND_HALF_UP)


def quantize_price(value) -> Decimal:
    """Round a menu price, total or margin for storage."""
    return Decimal(value).quantize(cogs_settings.price_quantum, rounding=ROUND_HALF_UP)
