"""
COGS Services.

- ConversionService: unit conversion
- IngredientCostService: ingredient and variation cost resolution
- recipe_costing / product_costing: pure cost aggregation
- PricingService: menu pricing
- SizeGroupService: size group invariants
- CascadeOrchestrator: ordered recalculation of everything derived
- SimulationService: what-if analysis of ingredient price changes
"""
from cogs.services.conversion_service import ConversionService
from cogs.services.ingredient_cost_service import IngredientCostService, IngredientCostResult
from cogs.services.recipe_costing import WorkspaceCostConfig, RecipeCostResult, calculate_recipe_cost
from cogs.services.product_costing import ProductCostResult, calculate_product_cost, derive_size_costs
from cogs.services.pricing_service import (
    PricingService,
    MenuPricingContext,
    margin_price,
    markup_price,
    effective_margin,
)
from cogs.services.cascade_service import CascadeOrchestrator, CancellationToken, JobStatus
from cogs.services.size_service import SizeGroupService
from cogs.services.simulation_service import SimulationService

__all__ = [
    'ConversionService',
    'IngredientCostService',
    'IngredientCostResult',
    'WorkspaceCostConfig',
    'RecipeCostResult',
    'calculate_recipe_cost',
    'ProductCostResult',
    'calculate_product_cost',
    'derive_size_costs',
    'PricingService',
    'MenuPricingContext',
    'margin_price',
    'markup_price',
    'effective_margin',
    'CascadeOrchestrator',
    'CancellationToken',
    'JobStatus',
    'SizeGroupService',
    'SimulationService',
]
