"""
Tests for composition validation.
"""
import pytest
from decimal import Decimal

from cogs.exceptions import (
    CyclicDependencyError,
    IncompatibleMeasurementTypeError,
    InvalidQuantityError,
    MissingComponentError,
)
from cogs.services.dependency_graph import INGREDIENT, VARIATION, RECIPE, PRODUCT
from cogs.services.validation_service import check_composition_line, check_recipe_item


@pytest.mark.django_db
class TestRecipeItemValidation:

    def test_valid_line_passes(self, flour, units, make_recipe):
        bread = make_recipe("Bread")

        check_recipe_item(bread, INGREDIENT, flour.id, Decimal("500"), units["g"])

    def test_variation_in_ingredient_unit(self, peeled_onion, units, make_recipe):
        soup = make_recipe("Soup")

        check_recipe_item(soup, VARIATION, peeled_onion.id, Decimal("0.2"), units["kg"])

    def test_self_reference_rejected(self, units, make_recipe):
        bread = make_recipe("Bread")

        with pytest.raises(CyclicDependencyError) as exc_info:
            check_recipe_item(bread, RECIPE, bread.id, Decimal("1"), units["un"])

        assert exc_info.value.cycle[0] == exc_info.value.cycle[-1]

    def test_indirect_cycle_rejected(self, units, make_recipe):
        """Test that A using B is rejected when B already uses A."""
        dough = make_recipe("Dough")
        pizza_base = make_recipe("Pizza Base", items=[(RECIPE, dough.id, "1", "un")])

        with pytest.raises(CyclicDependencyError):
            check_recipe_item(dough, RECIPE, pizza_base.id, Decimal("1"), units["un"])

    def test_incompatible_unit_rejected(self, flour, units, make_recipe):
        bread = make_recipe("Bread")

        with pytest.raises(IncompatibleMeasurementTypeError):
            check_recipe_item(bread, INGREDIENT, flour.id, Decimal("1"), units["ml"])

    def test_non_positive_quantity_rejected(self, flour, units, make_recipe):
        bread = make_recipe("Bread")

        with pytest.raises(InvalidQuantityError):
            check_recipe_item(bread, INGREDIENT, flour.id, Decimal("0"), units["g"])

    def test_missing_component_rejected(self, units, make_recipe):
        bread = make_recipe("Bread")

        with pytest.raises(MissingComponentError):
            check_recipe_item(bread, INGREDIENT, 555555, Decimal("1"), units["g"])

    def test_product_in_recipe_rejected(self, units, make_recipe, make_product):
        bread = make_recipe("Bread")
        soda = make_product("Soda")

        with pytest.raises(MissingComponentError):
            check_recipe_item(bread, PRODUCT, soda.id, Decimal("1"), units["un"])


@pytest.mark.django_db
class TestCompositionLineValidation:

    def test_nested_product_needs_no_unit(self, make_product):
        combo = make_product("Combo")
        fries = make_product("Fries")

        check_composition_line(combo, PRODUCT, fries.id, Decimal("1"))

    def test_ingredient_line_needs_unit(self, flour, make_product):
        pizza = make_product("Pizza")

        with pytest.raises(MissingComponentError):
            check_composition_line(pizza, INGREDIENT, flour.id, Decimal("100"))

    def test_nested_product_cycle_rejected(self, make_product):
        fries = make_product("Fries")
        combo = make_product("Combo", lines=[(PRODUCT, fries.id, "1", None)])

        with pytest.raises(CyclicDependencyError):
            check_composition_line(fries, PRODUCT, combo.id, Decimal("1"))
