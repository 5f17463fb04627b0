"""
Tests for recipe cost aggregation.
"""
import pytest
from decimal import Decimal
from types import SimpleNamespace

from cogs.exceptions import (
    IncompatibleMeasurementTypeError,
    InvalidQuantityError,
    MissingComponentError,
)
from cogs.services import (
    CascadeOrchestrator,
    WorkspaceCostConfig,
    calculate_recipe_cost,
)
from cogs.services.component_costs import ComponentCostTable
from cogs.services.dependency_graph import INGREDIENT, VARIATION, RECIPE
from cogs.services.recipe_costing import labor_cost
from inventory.models import Recipe


def _item(component_type, component_id, quantity, unit):
    return SimpleNamespace(
        component_type=component_type,
        component_id=component_id,
        quantity=Decimal(quantity),
        unit=unit,
    )


@pytest.mark.django_db
class TestCalculateRecipeCost:
    """Tests for the pure aggregation function."""

    def test_lines_labor_and_portion(self, units):
        """
        200 g at 0.01/g + 3 un at 0.50 = 3.50 of items, plus 30 minutes at 12.00/h.
        """
        table = ComponentCostTable()
        table.set_ingredient(1, Decimal("0.01"), units["kg"])
        table.set_ingredient(2, Decimal("0.50"), units["un"])
        recipe = SimpleNamespace(id=10, name="Omelette", yield_quantity=Decimal("2"), prep_time_minutes=30)
        items = [_item(INGREDIENT, 1, "200", units["g"]), _item(INGREDIENT, 2, "3", units["un"])]

        result = calculate_recipe_cost(recipe, items, table, WorkspaceCostConfig(hourly_labor_rate=Decimal("12")))

        assert result.items_cost == Decimal("3.50")
        assert result.labor_cost == Decimal("6")
        assert result.total_cost == Decimal("9.50")
        assert result.cost_per_portion == Decimal("4.75")
        assert [line.cost for line in result.lines] == [Decimal("2.00"), Decimal("1.50")]

    def test_recipe_without_items_costs_labor_only(self):
        recipe = SimpleNamespace(id=1, name="Prep", yield_quantity=Decimal("1"), prep_time_minutes=15)

        result = calculate_recipe_cost(recipe, [], ComponentCostTable(), WorkspaceCostConfig(hourly_labor_rate=Decimal("20")))

        assert result.total_cost == Decimal("5")

    def test_zero_yield_rejected(self):
        recipe = SimpleNamespace(id=1, name="Broken", yield_quantity=Decimal("0"), prep_time_minutes=None)

        with pytest.raises(InvalidQuantityError):
            calculate_recipe_cost(recipe, [], ComponentCostTable(), WorkspaceCostConfig())

    def test_missing_component_raises(self, units):
        recipe = SimpleNamespace(id=1, name="Dangling", yield_quantity=Decimal("1"), prep_time_minutes=None)

        with pytest.raises(MissingComponentError):
            calculate_recipe_cost(
                recipe, [_item(INGREDIENT, 999, "1", units["g"])], ComponentCostTable(), WorkspaceCostConfig()
            )

    def test_incompatible_line_unit_raises(self, units):
        table = ComponentCostTable()
        table.set_ingredient(1, Decimal("0.01"), units["kg"])
        recipe = SimpleNamespace(id=1, name="Soup", yield_quantity=Decimal("1"), prep_time_minutes=None)

        with pytest.raises(IncompatibleMeasurementTypeError):
            calculate_recipe_cost(recipe, [_item(INGREDIENT, 1, "1", units["l"])], table, WorkspaceCostConfig())

    def test_unpriced_component_is_flagged(self, units):
        table = ComponentCostTable()
        table.set_ingredient(1, Decimal("0"), units["kg"], is_priced=False)
        recipe = SimpleNamespace(id=1, name="Salted", yield_quantity=Decimal("1"), prep_time_minutes=None)

        result = calculate_recipe_cost(recipe, [_item(INGREDIENT, 1, "5", units["g"])], table, WorkspaceCostConfig())

        assert result.total_cost == Decimal("0")
        assert result.has_unpriced_components is True

    def test_labor_cost(self):
        config = WorkspaceCostConfig(hourly_labor_rate=Decimal("18"))

        assert labor_cost(20, config) == Decimal("6")
        assert labor_cost(None, config) == Decimal("0")


@pytest.mark.django_db
class TestRecipeRecalculation:
    """Tests for recalculating stored recipes."""

    def test_flour_recipe(self, tenant, flour, flour_entry, make_recipe):
        """A recipe using 500 g of flour at 0.000005/g costs 0.0025."""
        bread = make_recipe("Bread", items=[(INGREDIENT, flour.id, "500", "g")])

        result = CascadeOrchestrator(tenant).recalculate_recipe(bread.id)

        assert result.total_cost == Decimal("0.0025")
        bread.refresh_from_db()
        assert bread.total_cost == Decimal("0.002500")
        assert bread.cost_per_portion == Decimal("0.002500")

    def test_labor_uses_workspace_rate(self, tenant, flour, flour_entry, make_recipe):
        tenant.labor_cost_per_hour = Decimal("30")
        tenant.save()
        bread = make_recipe("Bread", items=[(INGREDIENT, flour.id, "500", "g")], prep_time_minutes=10)

        CascadeOrchestrator(tenant).recalculate_recipe(bread.id)

        bread.refresh_from_db()
        assert bread.labor_cost == Decimal("5")
        assert bread.total_cost == Decimal("5.0025")

    def test_sub_recipe_is_costed_per_yield_unit(self, tenant, flour, flour_entry, peeled_onion, make_recipe):
        """
        Scenario:
        - Sauce: 400 g peeled onion (0.005/g) = 2.00, yields 1 l
        - Pizza base: 250 ml of sauce + 500 g flour
        - Expected: 0.50 + 0.0025
        """
        sauce = make_recipe(
            "Sauce", items=[(VARIATION, peeled_onion.id, "400", "g")], yield_quantity="1", yield_unit="l"
        )
        base = make_recipe(
            "Pizza Base", items=[(RECIPE, sauce.id, "250", "ml"), (INGREDIENT, flour.id, "500", "g")]
        )

        result = CascadeOrchestrator(tenant).recalculate_recipe(base.id)

        assert result.total_cost == Decimal("0.5025")
        sauce.refresh_from_db()
        assert sauce.total_cost == Decimal("2")
        assert sauce.cost_per_portion == Decimal("2")

    def test_dangling_reference_raises(self, tenant, make_recipe):
        broken = make_recipe("Broken", items=[(INGREDIENT, 424242, "1", "g")])

        with pytest.raises(MissingComponentError):
            CascadeOrchestrator(tenant).recalculate_recipe(broken.id)

        assert Recipe.all_objects.get(pk=broken.pk).total_cost == Decimal("0")
