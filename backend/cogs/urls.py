"""
URL configuration for the COGS app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from cogs.views import (
    UnitViewSet,
    RecalculateRecipeCostsView,
    RecalculateProductCostsView,
    RecalculateVariationsView,
    SimulatePriceChangeView,
    MenuTargetMarginView,
)

# Create router for ViewSets
router = DefaultRouter()
router.register(r'units', UnitViewSet, basename='unit')

workspace_patterns = [
    # ViewSet routes
    path('', include(router.urls)),

    # Bulk recalculation
    path('recalculate-recipes/', RecalculateRecipeCostsView.as_view(), name='recalculate-recipes'),
    path('recalculate-products/', RecalculateProductCostsView.as_view(), name='recalculate-products'),
    path('recalculate-variations/', RecalculateVariationsView.as_view(), name='recalculate-variations'),

    # Pricing
    path('simulate/', SimulatePriceChangeView.as_view(), name='simulate-price-change'),
    path('menus/<int:pk>/target-margin/', MenuTargetMarginView.as_view(), name='menu-target-margin'),
]

urlpatterns = [
    path('workspaces/<slug:slug>/', include(workspace_patterns)),
]
