"""
Pytest fixtures for COGS tests.

Creating a tenant seeds its units, so every fixture below can look units up
by code. Supplier entry signals only fire on commit, which never happens in
a plain django_db test: tests run the cascade explicitly.
"""
import datetime
from decimal import Decimal

import pytest

from tenant.managers import set_current_tenant
from measurements.models import Unit
from inventory.models import (
    Ingredient,
    IngredientVariation,
    Recipe,
    RecipeItem,
    SupplierEntry,
)
from products.models import Product, ProductComposition, SizeGroup, SizeOption
from menus.models import Menu, MenuFee, FixedCost


@pytest.fixture
def tenant(tenant_a):
    """Workspace A with the tenant context set."""
    set_current_tenant(tenant_a)
    return tenant_a


@pytest.fixture
def units(tenant):
    """The workspace's seeded units keyed by code."""
    return {unit.code: unit for unit in Unit.all_objects.filter(tenant=tenant)}


@pytest.fixture
def make_ingredient(tenant, units):
    """Factory: ingredient priced per `price_unit` code."""
    def _make(name, price_unit="kg"):
        return Ingredient.objects.create(tenant=tenant, name=name, price_unit=units[price_unit])
    return _make


@pytest.fixture
def make_entry(tenant, units):
    """Factory: supplier entry for an ingredient."""
    def _make(ingredient, quantity, unit, total_price, date=None):
        return SupplierEntry.objects.create(
            tenant=tenant,
            ingredient=ingredient,
            quantity=Decimal(quantity),
            unit=units[unit],
            total_price=Decimal(total_price),
            date=date or datetime.date(2024, 1, 15),
        )
    return _make


@pytest.fixture
def make_recipe(tenant, units):
    """
    Factory: recipe with items given as (component_type, component_id, quantity, unit_code).
    """
    def _make(name, items=(), yield_quantity="1", yield_unit="un", prep_time_minutes=None):
        recipe = Recipe.objects.create(
            tenant=tenant,
            name=name,
            yield_quantity=Decimal(yield_quantity),
            yield_unit=units[yield_unit],
            prep_time_minutes=prep_time_minutes,
        )
        for sort_order, (component_type, component_id, quantity, unit) in enumerate(items):
            RecipeItem.objects.create(
                recipe=recipe,
                component_type=component_type,
                component_id=component_id,
                quantity=Decimal(quantity),
                unit=units[unit],
                sort_order=sort_order,
            )
        return recipe
    return _make


@pytest.fixture
def make_product(tenant, units):
    """
    Factory: product with lines given as (component_type, component_id, quantity, unit_code);
    unit_code is None for nested products.
    """
    def _make(name, lines=(), size_group=None):
        product = Product.objects.create(tenant=tenant, name=name, size_group=size_group)
        for sort_order, (component_type, component_id, quantity, unit) in enumerate(lines):
            ProductComposition.objects.create(
                product=product,
                component_type=component_type,
                component_id=component_id,
                quantity=Decimal(quantity),
                unit=units[unit] if unit else None,
                sort_order=sort_order,
            )
        return product
    return _make


@pytest.fixture
def flour(make_ingredient):
    return make_ingredient("Flour", price_unit="kg")


@pytest.fixture
def flour_entry(flour, make_entry):
    """1000 kg of flour for 5.00: 0.000005 per gram."""
    return make_entry(flour, "1000", "kg", "5.00")


@pytest.fixture
def onion(make_ingredient, make_entry):
    """Onions at 4.00 per kg (0.004 per gram)."""
    ingredient = make_ingredient("Onion", price_unit="kg")
    make_entry(ingredient, "1", "kg", "4.00")
    return ingredient


@pytest.fixture
def peeled_onion(tenant, onion, units):
    """1 kg of onions gives 800 g peeled: 80% yield."""
    return IngredientVariation.objects.create(
        tenant=tenant,
        ingredient=onion,
        name="Peeled",
        input_quantity=Decimal("1"),
        input_unit=units["kg"],
        output_quantity=Decimal("800"),
        output_unit=units["g"],
    )


@pytest.fixture
def pizza_sizes(tenant):
    """Small x0.7, Medium x1.0 (reference), Large x1.3."""
    group = SizeGroup.objects.create(tenant=tenant, name="Pizza Sizes")
    SizeOption.objects.create(group=group, name="Small", multiplier=Decimal("0.7"), sort_order=0)
    SizeOption.objects.create(
        group=group, name="Medium", multiplier=Decimal("1.0"), is_reference=True, sort_order=1
    )
    SizeOption.objects.create(group=group, name="Large", multiplier=Decimal("1.3"), sort_order=2)
    return group


@pytest.fixture
def size_options(pizza_sizes):
    return {option.name: option for option in pizza_sizes.options.all()}


@pytest.fixture
def menu(tenant):
    """Margin menu at 30% with no fees and no fixed-cost apportionment."""
    return Menu.objects.create(
        tenant=tenant,
        name="Dine In",
        pricing_mode=Menu.PricingMode.MARGIN,
        target_margin=Decimal("30"),
    )


@pytest.fixture
def markup_menu(tenant):
    return Menu.objects.create(
        tenant=tenant,
        name="Catering",
        pricing_mode=Menu.PricingMode.MARKUP,
        target_margin=Decimal("50"),
    )


@pytest.fixture
def delivery_menu(tenant):
    """Margin menu with a 10% commission and 0.50 per order packaging fee."""
    menu = Menu.objects.create(
        tenant=tenant,
        name="Delivery",
        pricing_mode=Menu.PricingMode.MARGIN,
        target_margin=Decimal("30"),
    )
    MenuFee.objects.create(menu=menu, name="App commission", fee_type=MenuFee.FeeType.PERCENTAGE, value=Decimal("10"))
    MenuFee.objects.create(menu=menu, name="Packaging", fee_type=MenuFee.FeeType.FIXED, value=Decimal("0.50"))
    return menu


@pytest.fixture
def rent(tenant):
    """3000.00 of monthly fixed costs."""
    return FixedCost.objects.create(tenant=tenant, name="Rent", value=Decimal("3000"))
