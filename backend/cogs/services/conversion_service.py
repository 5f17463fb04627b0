"""
Unit conversion service for COGS.

Every unit stores how many base units equal one of itself, so any two units of
the same measurement type convert through the base:

    result = quantity * from_unit.conversion_factor / to_unit.conversion_factor
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from measurements.models import Unit
from cogs.exceptions import IncompatibleMeasurementTypeError


class ConversionService:
    """
    Service for converting quantities between units.

    Supports:
    - Conversion between any two units of the same measurement type
    - Conversion to and from the measurement type's base unit

    Results are exact Decimals unless a precision is requested; callers
    quantize when they persist.
    """

    def __init__(self, tenant):
        self.tenant = tenant

    def convert(
        self,
        quantity: Decimal,
        from_unit: Unit,
        to_unit: Unit,
        precision: Optional[int] = None
    ) -> Decimal:
        """
        Convert a quantity from one unit to another.

        Args:
            quantity: The quantity to convert.
            from_unit: The source unit.
            to_unit: The target unit.
            precision: Decimal places to round to (default: no rounding).

        Returns:
            The converted quantity.

        Raises:
            IncompatibleMeasurementTypeError: If the units measure different things.
        """
        ensure_compatible(from_unit, to_unit)

        quantity = Decimal(quantity)
        if from_unit.pk is not None and from_unit.pk == to_unit.pk:
            result = quantity
        else:
            result = quantity * from_unit.conversion_factor / to_unit.conversion_factor

        return _round(result, precision)

    def to_base(self, quantity: Decimal, unit: Unit, precision: Optional[int] = None) -> Decimal:
        """Express a quantity in its measurement type's base unit."""
        return _round(to_base(quantity, unit), precision)

    def from_base(self, quantity: Decimal, unit: Unit, precision: Optional[int] = None) -> Decimal:
        """Express a base-unit quantity in the given unit."""
        return _round(Decimal(quantity) / unit.conversion_factor, precision)

    def can_convert(self, from_unit: Unit, to_unit: Unit) -> bool:
        return from_unit.measurement_type == to_unit.measurement_type


def ensure_compatible(from_unit, to_unit):
    if from_unit.measurement_type != to_unit.measurement_type:
        raise IncompatibleMeasurementTypeError(from_unit, to_unit)


def to_base(quantity, unit) -> Decimal:
    """Quantity in base units. Used by the pure cost functions."""
    return Decimal(quantity) * unit.conversion_factor


def _round(value: Decimal, precision: Optional[int]) -> Decimal:
    if precision is None:
        return value
    return value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
