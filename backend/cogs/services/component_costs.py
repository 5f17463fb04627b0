"""
Per-component cost lookup.

Composition lines are polymorphic over ingredient / variation / recipe /
product. The table answers "what does one base unit of this component cost"
through a dispatch table keyed on the component kind:

- ingredient: current unit cost per base unit
- variation:  yield-adjusted unit cost per base unit
- recipe:     cost per portion / yield unit factor
- product:    base cost per product (quantities are counts, no conversion)
"""
from dataclasses import dataclass
from functools import partial
from decimal import Decimal
from typing import Dict, Optional

from cogs.exceptions import MissingComponentError
from cogs.services.conversion_service import ensure_compatible, to_base
from cogs.services.dependency_graph import (
    ComponentRef,
    INGREDIENT,
    VARIATION,
    RECIPE,
    PRODUCT,
)


@dataclass
class ComponentCost:
    """Cost basis of one component."""
    cost_per_base: Decimal
    natural_unit: Optional[object] = None  # Unit the component is measured in; None for products
    sale_unit_cost: Decimal = Decimal("0")  # Cost of one sold item when listed on a menu
    is_priced: bool = True


class ComponentCostTable:
    """In-memory cost basis for every component of a workspace."""

    def __init__(self):
        self._costs: Dict[str, Dict[int, ComponentCost]] = {
            INGREDIENT: {},
            VARIATION: {},
            RECIPE: {},
            PRODUCT: {},
        }
        self._resolvers = {kind: partial(self._lookup, kind) for kind in self._costs}

    def set_ingredient(self, ingredient_id, unit_cost, price_unit, is_priced=True):
        self._costs[INGREDIENT][ingredient_id] = ComponentCost(
            cost_per_base=Decimal(unit_cost),
            natural_unit=price_unit,
            sale_unit_cost=Decimal(unit_cost) * price_unit.conversion_factor,
            is_priced=is_priced,
        )

    def set_variation(self, variation_id, unit_cost, unit, is_priced=True):
        self._costs[VARIATION][variation_id] = ComponentCost(
            cost_per_base=Decimal(unit_cost),
            natural_unit=unit,
            sale_unit_cost=Decimal(unit_cost) * unit.conversion_factor,
            is_priced=is_priced,
        )

    def set_recipe(self, recipe_id, cost_per_portion, total_cost, yield_unit, is_priced=True):
        self._costs[RECIPE][recipe_id] = ComponentCost(
            cost_per_base=Decimal(cost_per_portion) / yield_unit.conversion_factor,
            natural_unit=yield_unit,
            sale_unit_cost=Decimal(total_cost),
            is_priced=is_priced,
        )

    def set_product(self, product_id, base_cost, is_priced=True):
        self._costs[PRODUCT][product_id] = ComponentCost(
            cost_per_base=Decimal(base_cost),
            sale_unit_cost=Decimal(base_cost),
            is_priced=is_priced,
        )

    def has(self, ref: ComponentRef) -> bool:
        return ref.id in self._costs.get(ref.kind, {})

    def get(self, ref: ComponentRef) -> ComponentCost:
        resolver = self._resolvers.get(ref.kind)
        if resolver is None:
            raise MissingComponentError(ref.kind, ref.id, message=f"Unknown component type '{ref.kind}'")
        return resolver(ref.id)

    def cost_per_base_unit(self, ref: ComponentRef) -> Decimal:
        return self.get(ref).cost_per_base

    def sale_unit_cost(self, ref: ComponentRef) -> Decimal:
        return self.get(ref).sale_unit_cost

    def is_priced(self, ref: ComponentRef) -> bool:
        return self.get(ref).is_priced

    def line_cost(self, ref: ComponentRef, quantity, unit=None) -> Decimal:
        """
        Cost of `quantity` of a component.

        Nested products are counted, so their quantity multiplies the base
        cost directly. Everything else is converted to base units first.
        """
        basis = self.get(ref)
        if ref.kind == PRODUCT:
            return basis.cost_per_base * Decimal(quantity)
        if unit is None:
            raise MissingComponentError(ref.kind, ref.id, message=f"Line for {ref} has no unit")
        ensure_compatible(unit, basis.natural_unit)
        return basis.cost_per_base * to_base(quantity, unit)

    def _lookup(self, kind, component_id) -> ComponentCost:
        try:
            return self._costs[kind][component_id]
        except KeyError:
            raise MissingComponentError(kind, component_id)

