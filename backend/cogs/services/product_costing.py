"""
Product cost aggregation and size scaling.

A product's base cost is the sum of its composition lines, costed exactly like
recipe items. Products in a size group are costed for the reference size
only; every other size derives from it linearly:

    size cost = reference cost * option.multiplier / reference.multiplier

Size costs are never aggregated independently, so they cannot drift from the
reference however deep its recipe graph is.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List

from cogs.conf import quantize_cost
from cogs.exceptions import (
    InvalidPricingInputError,
    InvalidQuantityError,
    OrphanedSizeReferenceError,
)
from cogs.services.component_costs import ComponentCostTable
from cogs.services.recipe_costing import LineCost, cost_lines


@dataclass
class ProductCostResult:
    """Result of costing a product (reference size when sized)."""
    product_id: int
    base_cost: Decimal
    lines: List[LineCost] = field(default_factory=list)

    @property
    def has_unpriced_components(self) -> bool:
        return any(not line.is_priced for line in self.lines)

    def as_values(self) -> dict:
        return {'base_cost': quantize_cost(self.base_cost)}


def calculate_product_cost(product, lines: Iterable, table: ComponentCostTable) -> ProductCostResult:
    """
    Cost a product from its composition lines.

    Raises:
        InvalidQuantityError: a line quantity is not positive.
        IncompatibleMeasurementTypeError: a line's unit does not match its component.
        MissingComponentError: a line references a missing component.
    """
    costed = cost_lines(lines, table)
    base_cost = sum((line.cost for line in costed), Decimal("0"))
    if base_cost < 0:
        raise InvalidPricingInputError(
            cost=base_cost, message=f"Product '{product.name}' would get a negative cost ({base_cost})"
        )
    return ProductCostResult(product_id=product.id, base_cost=base_cost, lines=costed)


def reference_option(options: Iterable, size_group):
    """
    The single reference option of a size group.

    Raises:
        OrphanedSizeReferenceError: zero or several options are marked as reference.
    """
    references = [option for option in options if option.is_reference]
    if len(references) != 1:
        raise OrphanedSizeReferenceError(size_group)
    return references[0]


def size_cost(reference_cost, option, reference) -> Decimal:
    """Cost of `option` derived from the reference size's cost."""
    if option.multiplier is None or option.multiplier <= 0:
        raise InvalidQuantityError(option.multiplier, field="multiplier")
    if reference.multiplier is None or reference.multiplier <= 0:
        raise InvalidQuantityError(reference.multiplier, field="multiplier")
    if option.pk is not None and option.pk == reference.pk:
        return Decimal(reference_cost)
    return Decimal(reference_cost) * Decimal(option.multiplier) / Decimal(reference.multiplier)


def derive_size_costs(reference_cost, options: Iterable, size_group) -> Dict[int, Decimal]:
    """Costs of every option of a size group, keyed by option id."""
    options = list(options)
    reference = reference_option(options, size_group)
    return {option.pk: size_cost(reference_cost, option, reference) for option in options}

