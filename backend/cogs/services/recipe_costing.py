"""
Recipe cost aggregation.

calculate_recipe_cost() is a pure function of the recipe, its items, the
component cost table and the workspace config; it never reads ambient state
or touches the database. Persisting the result is the orchestrator's job.

    line cost        = cost per base unit of component * quantity in base units
    labor cost       = prep minutes / 60 * hourly labor rate
    total cost       = sum(line costs) + labor cost
    cost per portion = total cost / yield quantity   (per yield unit)
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from cogs.conf import quantize_cost
from cogs.exceptions import InvalidQuantityError, InvalidPricingInputError
from cogs.services.component_costs import ComponentCostTable
from cogs.services.dependency_graph import ComponentRef


MINUTES_PER_HOUR = Decimal("60")


@dataclass(frozen=True)
class WorkspaceCostConfig:
    """Workspace-wide inputs of cost aggregation."""
    hourly_labor_rate: Decimal = Decimal("0")
    monthly_labor_hours: Decimal = Decimal("0")

    @classmethod
    def from_tenant(cls, tenant) -> "WorkspaceCostConfig":
        return cls(
            hourly_labor_rate=Decimal(tenant.labor_cost_per_hour or 0),
            monthly_labor_hours=Decimal(tenant.monthly_labor_hours or 0),
        )


@dataclass
class LineCost:
    """Cost of a single composition line."""
    component: ComponentRef
    quantity: Decimal
    unit_code: Optional[str]
    cost: Decimal
    is_priced: bool = True


@dataclass
class RecipeCostResult:
    """Result of costing a recipe."""
    recipe_id: int
    items_cost: Decimal
    labor_cost: Decimal
    total_cost: Decimal
    cost_per_portion: Decimal
    lines: List[LineCost] = field(default_factory=list)

    @property
    def has_unpriced_components(self) -> bool:
        return any(not line.is_priced for line in self.lines)

    def as_values(self) -> dict:
        """Field values as persisted on the Recipe row."""
        return {
            'items_cost': quantize_cost(self.items_cost),
            'labor_cost': quantize_cost(self.labor_cost),
            'total_cost': quantize_cost(self.total_cost),
            'cost_per_portion': quantize_cost(self.cost_per_portion),
        }


def labor_cost(prep_time_minutes, config: WorkspaceCostConfig) -> Decimal:
    minutes = Decimal(prep_time_minutes or 0)
    return minutes * config.hourly_labor_rate / MINUTES_PER_HOUR


def cost_lines(items: Iterable, table: ComponentCostTable) -> List[LineCost]:
    """
    Cost every line of a composition.

    Items need component_type, component_id, quantity and unit attributes
    (RecipeItem and ProductComposition both qualify).
    """
    lines = []
    for item in items:
        if item.quantity is None or item.quantity <= 0:
            raise InvalidQuantityError(item.quantity)
        ref = ComponentRef(item.component_type, item.component_id)
        unit = getattr(item, 'unit', None)
        lines.append(LineCost(
            component=ref,
            quantity=Decimal(item.quantity),
            unit_code=unit.code if unit is not None else None,
            cost=table.line_cost(ref, item.quantity, unit),
            is_priced=table.is_priced(ref),
        ))
    return lines


def calculate_recipe_cost(recipe, items, table: ComponentCostTable, config: WorkspaceCostConfig) -> RecipeCostResult:
    """
    Cost a recipe from its items.

    Raises:
        InvalidQuantityError: yield or line quantity is not positive.
        IncompatibleMeasurementTypeError: a line's unit does not match its component.
        MissingComponentError: a line references a missing component.
    """
    if recipe.yield_quantity is None or recipe.yield_quantity <= 0:
        raise InvalidQuantityError(recipe.yield_quantity, field="yield_quantity")

    lines = cost_lines(items, table)
    items_cost = sum((line.cost for line in lines), Decimal("0"))
    labor = labor_cost(recipe.prep_time_minutes, config)
    total = items_cost + labor

    if total < 0:
        raise InvalidPricingInputError(
            cost=total, message=f"Recipe '{recipe.name}' would get a negative cost ({total})"
        )

    return RecipeCostResult(
        recipe_id=recipe.id,
        items_cost=items_cost,
        labor_cost=labor,
        total_cost=total,
        cost_per_portion=total / Decimal(recipe.yield_quantity),
        lines=lines,
    )
