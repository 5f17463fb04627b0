"""
What-if analysis for ingredient price changes.

Runs the regular cascade with an overridden ingredient cost inside a
transaction that is always rolled back, and reports what would change.
"""
import logging
from decimal import Decimal

from cogs.conf import quantize_unit_cost
from cogs.exceptions import InvalidPricingInputError, MissingComponentError
from cogs.services.cascade_service import CascadeOrchestrator, MENU_ENTRY
from cogs.services.dependency_graph import INGREDIENT, VARIATION, RECIPE, PRODUCT
from inventory.models import Ingredient

logger = logging.getLogger(__name__)

# Field compared for each entity type
COST_FIELDS = {
    INGREDIENT: 'unit_cost',
    VARIATION: 'unit_cost',
    RECIPE: 'total_cost',
    PRODUCT: 'base_cost',
    MENU_ENTRY: 'total_cost',
}


class SimulationService:
    """Service for simulating ingredient cost changes without persisting them."""

    def __init__(self, tenant):
        self.tenant = tenant

    def simulate_price_change(self, ingredient_id, new_unit_cost) -> dict:
        """
        Report the effect of a new cost per base unit for one ingredient.

        Returns:
            Dict with the ingredient's old and new cost and one impact row per
            affected entity, grouped by entity type.
        """
        new_unit_cost = Decimal(new_unit_cost)
        if new_unit_cost < 0:
            raise InvalidPricingInputError(cost=new_unit_cost, message=f"Cost cannot be negative (got {new_unit_cost})")

        ingredient = Ingredient.all_objects.filter(tenant=self.tenant, pk=ingredient_id).first()
        if ingredient is None:
            raise MissingComponentError(INGREDIENT, ingredient_id)

        job = CascadeOrchestrator(self.tenant).simulate_ingredient_costs({ingredient.pk: new_unit_cost})

        impact = {'variations': [], 'recipes': [], 'products': [], 'menu_entries': []}
        keys = {VARIATION: 'variations', RECIPE: 'recipes', PRODUCT: 'products', MENU_ENTRY: 'menu_entries'}
        for change in job.changes:
            key = keys.get(change['entity_type'])
            if key is None:
                continue
            impact[key].append(self._impact_row(change))

        logger.info(
            f"Simulated {ingredient.name} at {new_unit_cost}: "
            f"{sum(len(rows) for rows in impact.values())} entities affected"
        )
        return {
            'ingredient_id': ingredient.pk,
            'ingredient_name': ingredient.name,
            'old_unit_cost': ingredient.unit_cost,
            'new_unit_cost': quantize_unit_cost(new_unit_cost),
            'impact': impact,
            'errors': job.errors,
        }

    def _impact_row(self, change) -> dict:
        cost_field = COST_FIELDS[change['entity_type']]
        old = change['old'].get(cost_field)
        new = change['new'].get(cost_field)
        row = {
            'entity_id': change['entity_id'],
            'name': change['name'],
            'old_cost': old,
            'new_cost': new,
            'difference': (new - old) if old is not None and new is not None else None,
        }
        if change['entity_type'] == MENU_ENTRY:
            margin = change['new'].get('margin_value')
            row['new_margin'] = change['new'].get('margin_percentage')
            row['negative_margin'] = margin is not None and margin < 0
            row['effective_price'] = change.get('effective_price')
        return row
