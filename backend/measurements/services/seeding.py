"""
Unit seeding service for measurements.

Units are per workspace; the standard set is seeded when a workspace is created.
"""
from decimal import Decimal

from measurements.models import Unit, MeasurementType


# Standard units - one base unit per measurement type
DEFAULT_UNITS = [
    # Weight units (base: gram)
    {"code": "g", "name": "gram", "measurement_type": MeasurementType.WEIGHT,
     "is_base": True, "conversion_factor": Decimal("1")},
    {"code": "kg", "name": "kilogram", "measurement_type": MeasurementType.WEIGHT,
     "is_base": False, "conversion_factor": Decimal("1000")},
    {"code": "mg", "name": "milligram", "measurement_type": MeasurementType.WEIGHT,
     "is_base": False, "conversion_factor": Decimal("0.001")},

    # Volume units (base: milliliter)
    {"code": "ml", "name": "milliliter", "measurement_type": MeasurementType.VOLUME,
     "is_base": True, "conversion_factor": Decimal("1")},
    {"code": "l", "name": "liter", "measurement_type": MeasurementType.VOLUME,
     "is_base": False, "conversion_factor": Decimal("1000")},

    # Count units (base: unit)
    {"code": "un", "name": "unit", "measurement_type": MeasurementType.COUNT,
     "is_base": True, "conversion_factor": Decimal("1")},
    {"code": "dz", "name": "dozen", "measurement_type": MeasurementType.COUNT,
     "is_base": False, "conversion_factor": Decimal("12")},
]


def seed_units(tenant):
    """
    Seed the standard units for a workspace (idempotent).

    Returns:
        dict: A mapping of unit codes to Unit instances.
    """
    unit_map = {}

    for unit_data in DEFAULT_UNITS:
        unit, _ = Unit.all_objects.get_or_create(
            tenant=tenant,
            code=unit_data["code"],
            defaults={
                "name": unit_data["name"],
                "measurement_type": unit_data["measurement_type"],
                "is_base": unit_data["is_base"],
                "conversion_factor": unit_data["conversion_factor"],
            }
        )
        unit_map[unit.code] = unit

    return unit_map


def get_base_unit(tenant, measurement_type) -> Unit | None:
    """Get the base unit of a measurement type for a workspace."""
    return Unit.all_objects.filter(
        tenant=tenant,
        measurement_type=measurement_type,
        is_base=True,
    ).first()
