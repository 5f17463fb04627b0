"""
Measurements services.
"""
from measurements.services.seeding import (
    seed_units,
    get_base_unit,
    DEFAULT_UNITS,
)

__all__ = [
    'seed_units',
    'get_base_unit',
    'DEFAULT_UNITS',
]
