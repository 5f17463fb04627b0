"""
Tests for product cost aggregation and size scaling.
"""
import pytest
from decimal import Decimal
from types import SimpleNamespace

from cogs.exceptions import (
    InvalidQuantityError,
    MissingComponentError,
    OrphanedSizeReferenceError,
)
from cogs.services import CascadeOrchestrator, calculate_product_cost, derive_size_costs
from cogs.services.component_costs import ComponentCostTable
from cogs.services.dependency_graph import INGREDIENT, RECIPE, PRODUCT
from products.models import Product, ProductComposition, SizeGroup, SizeOption


def _option(pk, multiplier, is_reference=False):
    return SimpleNamespace(pk=pk, multiplier=Decimal(multiplier), is_reference=is_reference)


class TestSizeScaling:
    """Size costs derive linearly from the reference cost."""

    def test_proportional_sizes(self):
        """P x0.7 / M x1.0 (ref) / G x1.3 at 10.00 give 7.00 / 10.00 / 13.00."""
        options = [_option(1, "0.7"), _option(2, "1.0", True), _option(3, "1.3")]

        costs = derive_size_costs(Decimal("10.00"), options, SimpleNamespace(name="Pizza"))

        assert costs == {1: Decimal("7.00"), 2: Decimal("10.00"), 3: Decimal("13.00")}

    def test_non_unit_reference_multiplier(self):
        """Test that a reference with multiplier 2 halves the ratio of every other size."""
        options = [_option(1, "1"), _option(2, "2", True), _option(3, "3")]

        costs = derive_size_costs(Decimal("8"), options, SimpleNamespace(name="Cups"))

        assert costs == {1: Decimal("4"), 2: Decimal("8"), 3: Decimal("12")}

    def test_no_reference_raises(self):
        options = [_option(1, "1"), _option(2, "2")]

        with pytest.raises(OrphanedSizeReferenceError):
            derive_size_costs(Decimal("8"), options, SimpleNamespace(name="Cups"))

    def test_two_references_raise(self):
        options = [_option(1, "1", True), _option(2, "2", True)]

        with pytest.raises(OrphanedSizeReferenceError):
            derive_size_costs(Decimal("8"), options, SimpleNamespace(name="Cups"))

    def test_non_positive_multiplier_raises(self):
        options = [_option(1, "0"), _option(2, "1", True)]

        with pytest.raises(InvalidQuantityError):
            derive_size_costs(Decimal("8"), options, SimpleNamespace(name="Cups"))


@pytest.mark.django_db
class TestCalculateProductCost:
    """Tests for the pure aggregation function."""

    def test_mixed_lines(self, units):
        table = ComponentCostTable()
        table.set_ingredient(1, Decimal("0.004"), units["kg"])
        table.set_recipe(2, Decimal("3"), Decimal("3"), units["un"])
        table.set_product(3, Decimal("1.25"))
        product = SimpleNamespace(id=9, name="Combo")
        lines = [
            SimpleNamespace(component_type=INGREDIENT, component_id=1, quantity=Decimal("50"), unit=units["g"]),
            SimpleNamespace(component_type=RECIPE, component_id=2, quantity=Decimal("2"), unit=units["un"]),
            SimpleNamespace(component_type=PRODUCT, component_id=3, quantity=Decimal("2"), unit=None),
        ]

        result = calculate_product_cost(product, lines, table)

        assert result.base_cost == Decimal("8.70")
        assert [line.cost for line in result.lines] == [Decimal("0.2"), Decimal("6"), Decimal("2.50")]

    def test_missing_nested_product_raises(self):
        product = SimpleNamespace(id=9, name="Combo")
        lines = [SimpleNamespace(component_type=PRODUCT, component_id=404, quantity=Decimal("1"), unit=None)]

        with pytest.raises(MissingComponentError):
            calculate_product_cost(product, lines, ComponentCostTable())


@pytest.mark.django_db
class TestProductRecalculation:
    """Tests for recalculating stored products."""

    @pytest.fixture
    def dough_mix(self, make_ingredient, make_entry):
        ingredient = make_ingredient("Dough Mix")
        make_entry(ingredient, "1", "kg", "20.00")
        return ingredient

    @pytest.fixture
    def margherita(self, dough_mix, make_recipe, make_product, pizza_sizes):
        """Medium margherita whose base recipe costs 10.00."""
        base = make_recipe("Base", items=[(INGREDIENT, dough_mix.id, "500", "g")])
        return make_product("Margherita", lines=[(RECIPE, base.id, "1", "un")], size_group=pizza_sizes)

    def test_base_cost_and_line_costs(self, tenant, margherita):
        base_cost = CascadeOrchestrator(tenant).recalculate_product(margherita.id)

        assert base_cost == Decimal("10.000000")
        margherita.refresh_from_db()
        assert margherita.base_cost == Decimal("10")
        line = ProductComposition.objects.get(product=margherita)
        assert line.calculated_cost == Decimal("10")

    def test_size_costs(self, tenant, margherita, size_options):
        orchestrator = CascadeOrchestrator(tenant)

        assert orchestrator.recalculate_product_for_size(margherita.id, size_options["Small"].id) == Decimal("7")
        assert orchestrator.recalculate_product_for_size(margherita.id, size_options["Medium"].id) == Decimal("10")
        assert orchestrator.recalculate_product_for_size(margherita.id, size_options["Large"].id) == Decimal("13")

    def test_sizes_follow_recipe_change(self, tenant, margherita, size_options, dough_mix, make_entry):
        """
        Doubling the recipe cost to 20.00 moves P/G to 14.00/26.00 without
        touching the multipliers.
        """
        orchestrator = CascadeOrchestrator(tenant)
        orchestrator.recalculate_product(margherita.id)

        make_entry(dough_mix, "1", "kg", "40.00")

        assert orchestrator.recalculate_product_for_size(margherita.id, size_options["Small"].id) == Decimal("14")
        assert orchestrator.recalculate_product_for_size(margherita.id, size_options["Large"].id) == Decimal("26")
        size_options["Small"].refresh_from_db()
        assert size_options["Small"].multiplier == Decimal("0.7")

    def test_size_of_other_group_rejected(self, tenant, margherita, make_product):
        unsized = make_product("Soda")

        with pytest.raises(MissingComponentError):
            CascadeOrchestrator(tenant).recalculate_product_for_size(unsized.id, margherita.size_group.options.first().id)

    def test_size_of_unrelated_group_is_missing_not_orphaned(self, tenant, margherita):
        """Test that a valid group's option is rejected as a missing size, not a broken group."""
        drinks = SizeGroup.objects.create(tenant=tenant, name="Drink Sizes")
        pint = SizeOption.objects.create(group=drinks, name="Pint", multiplier=Decimal("1"), is_reference=True)

        with pytest.raises(MissingComponentError) as exc_info:
            CascadeOrchestrator(tenant).recalculate_product_for_size(margherita.id, pint.id)

        assert not isinstance(exc_info.value, OrphanedSizeReferenceError)
        assert "not a size of product" in str(exc_info.value)

    def test_nested_product(self, tenant, margherita, make_product):
        """Test that a combo of two pizzas costs twice the pizza's base cost."""
        combo = make_product("Double Deal", lines=[(PRODUCT, margherita.id, "2", None)])

        assert CascadeOrchestrator(tenant).recalculate_product(combo.id) == Decimal("20")
        assert Product.all_objects.get(pk=margherita.pk).base_cost == Decimal("10")
