"""
COGS serializers package.
"""

# Unit serializers
from .unit_serializers import UnitSerializer

# Job serializers
from .job_serializers import (
    RecalculationErrorSerializer,
    RecalculationResultSerializer,
    SimulatePriceChangeSerializer,
    TargetMarginSerializer,
)

__all__ = [
    'UnitSerializer',
    'RecalculationErrorSerializer',
    'RecalculationResultSerializer',
    'SimulatePriceChangeSerializer',
    'TargetMarginSerializer',
]
