"""
COGS views package.
"""

# Workspace views
from .workspace_views import (
    RecalculateRecipeCostsView,
    RecalculateProductCostsView,
    RecalculateVariationsView,
    SimulatePriceChangeView,
)

# Menu views
from .menu_views import MenuTargetMarginView

# Unit views
from .unit_views import UnitViewSet

__all__ = [
    'RecalculateRecipeCostsView',
    'RecalculateProductCostsView',
    'RecalculateVariationsView',
    'SimulatePriceChangeView',
    'MenuTargetMarginView',
    'UnitViewSet',
]
