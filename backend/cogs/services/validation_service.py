"""
Structural checks for composition edits.

The aggregators assume the cost graph is acyclic and every line's unit
measures the same thing as its component. These checks enforce that before a
RecipeItem or ProductComposition line is written.
"""
from decimal import Decimal

from cogs.exceptions import (
    CyclicDependencyError,
    InvalidQuantityError,
    MissingComponentError,
)
from cogs.services.conversion_service import ensure_compatible
from cogs.services.dependency_graph import (
    ComponentRef,
    CostGraph,
    INGREDIENT,
    VARIATION,
    RECIPE,
    PRODUCT,
)


def _component_unit(tenant, ref: ComponentRef):
    """Unit the component is measured in, or None for products."""
    from inventory.models import Ingredient, IngredientVariation, Recipe
    from products.models import Product

    if ref.kind == INGREDIENT:
        row = Ingredient.all_objects.filter(tenant=tenant, pk=ref.id).select_related('price_unit').first()
        unit = row.price_unit if row else None
    elif ref.kind == VARIATION:
        row = IngredientVariation.all_objects.filter(tenant=tenant, pk=ref.id).select_related(
            'ingredient__price_unit'
        ).first()
        unit = row.ingredient.price_unit if row else None
    elif ref.kind == RECIPE:
        row = Recipe.all_objects.filter(tenant=tenant, pk=ref.id).select_related('yield_unit').first()
        unit = row.yield_unit if row else None
    elif ref.kind == PRODUCT:
        row = Product.all_objects.filter(tenant=tenant, pk=ref.id).first()
        unit = None
    else:
        raise MissingComponentError(ref.kind, ref.id, message=f"Unknown component type '{ref.kind}'")

    if row is None:
        raise MissingComponentError(ref.kind, ref.id)
    return unit


def check_edge(tenant, component: ComponentRef, consumer: ComponentRef, graph=None):
    """
    Raises:
        CyclicDependencyError: adding component -> consumer closes a cycle.
    """
    graph = graph or CostGraph.for_tenant(tenant)
    if graph.would_create_cycle(component, consumer):
        if component == consumer:
            raise CyclicDependencyError([component, component])
        raise CyclicDependencyError([component, consumer, component])


def _check_line(tenant, consumer, component_type, component_id, quantity, unit, graph):
    if quantity is None or Decimal(quantity) <= 0:
        raise InvalidQuantityError(quantity)

    component = ComponentRef(component_type, component_id)
    natural_unit = _component_unit(tenant, component)
    if natural_unit is not None:
        if unit is None:
            raise MissingComponentError(
                component.kind, component.id, message=f"A unit is required for {component}"
            )
        ensure_compatible(unit, natural_unit)

    check_edge(tenant, component, consumer, graph)


def check_recipe_item(recipe, component_type, component_id, quantity, unit, graph=None):
    """
    Validate a recipe line before it is saved.

    Raises:
        CyclicDependencyError, InvalidQuantityError, IncompatibleMeasurementTypeError,
        MissingComponentError
    """
    if component_type == PRODUCT:
        raise MissingComponentError(
            component_type, component_id, message="Recipes cannot contain products"
        )
    _check_line(recipe.tenant, ComponentRef(RECIPE, recipe.pk), component_type, component_id, quantity, unit, graph)


def check_composition_line(product, component_type, component_id, quantity, unit=None, graph=None):
    """Validate a product composition line before it is saved."""
    _check_line(product.tenant, ComponentRef(PRODUCT, product.pk), component_type, component_id, quantity, unit, graph)
