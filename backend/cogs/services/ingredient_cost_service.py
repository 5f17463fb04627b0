"""
Ingredient cost resolution.

Policy: the most recent supplier entry wins (latest date, then latest
creation time). Its price is converted to a cost per base unit:

    unit_cost = total_price / (quantity * entry_unit.conversion_factor)

Ingredients without entries cost 0 and are flagged as unpriced. That is not
an error: it has to stay visible in aggregates, but must not block them.

Variations derive from the ingredient's cost through their yield:

    yield %        = output in base units / input in base units * 100
    variation cost = ingredient unit cost / (yield % / 100)
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from cogs.conf import quantize_price, quantize_unit_cost
from cogs.exceptions import InvalidYieldError
from cogs.services.conversion_service import ensure_compatible, to_base
from inventory.models import Ingredient, IngredientVariation, SupplierEntry

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


@dataclass
class IngredientCostResult:
    """Resolved cost of an ingredient."""
    ingredient_id: int
    unit_cost: Decimal  # Per base unit
    average_price: Decimal  # Per price unit
    is_priced: bool
    entry_id: Optional[int] = None

    def as_values(self) -> dict:
        return {
            'unit_cost': quantize_unit_cost(self.unit_cost),
            'average_price': quantize_price(self.average_price),
            'is_priced': self.is_priced,
        }


@dataclass
class VariationCostResult:
    """Resolved yield and cost of a variation."""
    variation_id: int
    yield_percentage: Decimal
    unit_cost: Decimal

    def as_values(self) -> dict:
        return {
            'yield_percentage': quantize_price(self.yield_percentage),
            'unit_cost': quantize_unit_cost(self.unit_cost),
        }


def unit_cost_from_entry(entry, ingredient) -> Decimal:
    """
    Cost per base unit implied by a supplier entry.

    Raises:
        IncompatibleMeasurementTypeError: entry unit and ingredient measure different things.
    """
    ensure_compatible(entry.unit, ingredient.price_unit)
    return Decimal(entry.total_price) / to_base(entry.quantity, entry.unit)


def resolve_from_entry(ingredient, entry) -> IngredientCostResult:
    """Pure resolution given the latest entry (or None)."""
    if entry is None:
        return IngredientCostResult(
            ingredient_id=ingredient.id,
            unit_cost=Decimal("0"),
            average_price=Decimal("0"),
            is_priced=False,
        )
    unit_cost = quantize_unit_cost(unit_cost_from_entry(entry, ingredient))
    return IngredientCostResult(
        ingredient_id=ingredient.id,
        unit_cost=unit_cost,
        average_price=unit_cost * ingredient.price_unit.conversion_factor,
        is_priced=True,
        entry_id=entry.id,
    )


def compute_yield_percentage(variation) -> Decimal:
    """
    Output over input, both in base units, as a percentage.

    Raises:
        IncompatibleMeasurementTypeError: input and output units measure different things.
        InvalidYieldError: input or output is zero.
    """
    ensure_compatible(variation.input_unit, variation.output_unit)
    input_base = to_base(variation.input_quantity, variation.input_unit)
    output_base = to_base(variation.output_quantity, variation.output_unit)
    if input_base <= 0 or output_base <= 0:
        raise InvalidYieldError(variation)
    return output_base / input_base * HUNDRED


def variation_unit_cost(base_unit_cost, yield_percentage) -> Decimal:
    """Cost per base unit of a processed ingredient at the given yield."""
    yield_percentage = Decimal(yield_percentage)
    if yield_percentage <= 0:
        raise InvalidYieldError(
            None, message=f"Yield must be greater than 0% (got {yield_percentage}%)"
        )
    return Decimal(base_unit_cost) / (yield_percentage / HUNDRED)


def resolve_variation(variation, ingredient_unit_cost) -> VariationCostResult:
    """
    Pure resolution of a variation given its ingredient's unit cost.

    The cost uses the exact input/output ratio rather than the rounded
    percentage so stored values do not depend on display rounding.
    """
    ensure_compatible(variation.input_unit, variation.ingredient.price_unit)
    yield_percentage = compute_yield_percentage(variation)
    input_base = to_base(variation.input_quantity, variation.input_unit)
    output_base = to_base(variation.output_quantity, variation.output_unit)
    return VariationCostResult(
        variation_id=variation.id,
        yield_percentage=yield_percentage,
        unit_cost=Decimal(ingredient_unit_cost) * input_base / output_base,
    )


class IngredientCostService:
    """
    Service for resolving ingredient and variation costs from the database.

    Read-only: persistence happens through the cascade orchestrator so every
    cost change also reaches recipes, products and menus.
    """

    def __init__(self, tenant):
        self.tenant = tenant

    def latest_entry(self, ingredient) -> Optional[SupplierEntry]:
        """Most recent entry: latest date, then latest creation time."""
        return SupplierEntry.all_objects.filter(
            tenant=self.tenant,
            ingredient=ingredient,
        ).select_related('unit').order_by('-date', '-created_at', '-id').first()

    def resolve_unit_cost(self, ingredient) -> IngredientCostResult:
        """
        Resolve an ingredient's current cost per base unit.

        Args:
            ingredient: Ingredient instance or id.
        """
        if not isinstance(ingredient, Ingredient):
            ingredient = Ingredient.all_objects.select_related('price_unit').get(
                tenant=self.tenant, pk=ingredient
            )

        result = resolve_from_entry(ingredient, self.latest_entry(ingredient))
        if not result.is_priced:
            logger.debug(f"Ingredient {ingredient.id} ({ingredient.name}) has no supplier entries")
        return result

    def resolve_variation(self, variation) -> VariationCostResult:
        if not isinstance(variation, IngredientVariation):
            variation = IngredientVariation.all_objects.select_related(
                'ingredient__price_unit', 'input_unit', 'output_unit'
            ).get(tenant=self.tenant, pk=variation)
        ingredient_cost = self.resolve_unit_cost(variation.ingredient).unit_cost
        return resolve_variation(variation, ingredient_cost)

    def unpriced_ingredients(self):
        return Ingredient.all_objects.filter(tenant=self.tenant, is_priced=False)

    def apply(self, ingredient) -> bool:
        """
        Persist the ingredient's resolved cost and cascade it downstream.

        Returns:
            True if any stored value changed.
        """
        from cogs.services.cascade_service import CascadeOrchestrator

        ingredient_id = getattr(ingredient, 'pk', ingredient)
        result = CascadeOrchestrator(self.tenant).recalculate_for_ingredient(ingredient_id)
        return result['changed'] > 0
