"""
Tests for SizeGroupService.
"""
import pytest
from decimal import Decimal

from cogs.exceptions import InvalidQuantityError, OrphanedSizeReferenceError
from cogs.services import CascadeOrchestrator, PricingService, SizeGroupService
from cogs.services.dependency_graph import INGREDIENT, RECIPE
from menus.models import MenuEntry
from products.models import SizeOption


@pytest.fixture
def sized_pizza(tenant, make_ingredient, make_entry, make_recipe, make_product, pizza_sizes, menu):
    """Pizza whose reference (Medium) composition costs 10.00, with every size on the menu."""
    cheese = make_ingredient("Cheese")
    make_entry(cheese, "1", "kg", "20.00")
    base = make_recipe("Cheese Base", items=[(INGREDIENT, cheese.id, "500", "g")])
    pizza = make_product("Cheese Pizza", lines=[(RECIPE, base.id, "1", "un")], size_group=pizza_sizes)
    CascadeOrchestrator(tenant).recalculate_product(pizza.id)
    PricingService(tenant).add_all_sizes(menu, pizza)
    return pizza


def _entry_costs(menu):
    return {
        entry.size_option.name: entry.cost
        for entry in MenuEntry.objects.filter(menu=menu).select_related('size_option')
    }


@pytest.mark.django_db
class TestSizeGroupService:
    """Tests for size group invariants."""

    def test_create_group_first_option_is_reference(self, tenant):
        group = SizeGroupService(tenant).create_group(
            "Cups", options=[("Short", Decimal("0.8")), ("Tall", Decimal("1")), ("Grande", Decimal("1.4"))]
        )

        references = list(group.options.filter(is_reference=True))
        assert [option.name for option in references] == ["Short"]

    def test_create_group_with_flagged_reference(self, tenant):
        group = SizeGroupService(tenant).create_group(
            "Cups", options=[("Short", Decimal("0.8")), ("Tall", Decimal("1"), True)]
        )

        assert group.reference_option.name == "Tall"

    def test_create_group_rejects_zero_multiplier(self, tenant):
        with pytest.raises(InvalidQuantityError):
            SizeGroupService(tenant).create_group("Cups", options=[("Nothing", Decimal("0"))])

    def test_add_option(self, tenant):
        service = SizeGroupService(tenant)
        group = service.create_group("Bowls")

        first = service.add_option(group, "Regular", Decimal("1"))
        second = service.add_option(group, "Large", Decimal("1.5"))

        assert first.is_reference is True
        assert second.is_reference is False
        assert second.sort_order == first.sort_order + 1

    def test_update_multiplier_reprices_menu(self, tenant, sized_pizza, size_options, menu):
        SizeGroupService(tenant).update_multiplier(size_options["Large"], Decimal("1.5"))

        assert _entry_costs(menu)["Large"] == Decimal("15")

    def test_update_multiplier_rejects_negative(self, tenant, size_options):
        with pytest.raises(InvalidQuantityError):
            SizeGroupService(tenant).update_multiplier(size_options["Large"], Decimal("-1"))

    def test_set_reference(self, tenant, sized_pizza, size_options, menu):
        """
        The composition now describes the Large size: Large costs 10.00 and
        every other size derives from it.
        """
        SizeGroupService(tenant).set_reference(size_options["Large"])

        reference = SizeOption.objects.get(group=size_options["Large"].group, is_reference=True)
        assert reference.pk == size_options["Large"].pk
        costs = _entry_costs(menu)
        assert costs["Large"] == Decimal("10")
        assert costs["Medium"] == Decimal("7.6923")
        assert costs["Small"] == Decimal("5.3846")

    def test_delete_reference_promotes_lowest_sort_order(self, tenant, sized_pizza, size_options, pizza_sizes):
        SizeGroupService(tenant).delete_option(size_options["Medium"])

        assert pizza_sizes.reference_option.pk == size_options["Small"].pk
        assert pizza_sizes.options.count() == 2

    def test_delete_last_option_in_use_rejected(self, tenant, make_product):
        service = SizeGroupService(tenant)
        group = service.create_group("Single", options=[("One", Decimal("1"))])
        make_product("Uses Single", size_group=group)

        with pytest.raises(OrphanedSizeReferenceError):
            service.delete_option(group.options.get())

        assert group.options.count() == 1

    def test_delete_last_option_of_unused_group(self, tenant):
        service = SizeGroupService(tenant)
        group = service.create_group("Single", options=[("One", Decimal("1"))])

        service.delete_option(group.options.get())

        assert group.options.count() == 0

    def test_validate_group_detects_missing_reference(self, tenant, pizza_sizes):
        SizeOption.objects.filter(group=pizza_sizes).update(is_reference=False)

        with pytest.raises(OrphanedSizeReferenceError):
            SizeGroupService(tenant).validate_group(pizza_sizes)
