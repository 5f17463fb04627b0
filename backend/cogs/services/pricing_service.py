"""
Pricing engine.

Two mutually exclusive modes per menu:

- margin: the target m is a share of the SALE PRICE   -> price = cost / (1 - m/100)
- markup: the target m is a share on top of COST      -> price = cost * (1 + m/100)

The inverse, effective margin = (price - cost) / price * 100, is the same in
both modes and only used for display and audit.

Menus add two kinds of overhead to the item cost:
- fees: fixed per sale, or a percentage of the sale price
- a share of the workspace's monthly fixed costs, apportioned as a
  percentage of sale, a fixed amount per product, or total fixed costs over
  the expected monthly sales volume

Percentage-of-price overheads move to the denominator of the suggested price;
fixed amounts add to the cost. Without fees both formulas reduce to the plain
mode formulas above.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from django.db.models import Sum

from cogs.conf import quantize_price
from cogs.exceptions import (
    COGSError,
    DuplicateMenuEntryError,
    InvalidPricingInputError,
    MissingComponentError,
)
from cogs.services.product_costing import reference_option, size_cost
from inventory.models import Ingredient, Recipe
from menus.models import Menu, MenuEntry, MenuFee, FixedCost
from products.models import Product, SizeOption

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
ZERO = Decimal("0")


def validate_pricing_input(cost, target, mode=Menu.PricingMode.MARGIN):
    """
    Reject inputs that cannot produce a price.

    Raises:
        InvalidPricingInputError: negative cost, negative target, or margin >= 100%.
    """
    if cost is None or Decimal(cost) < 0:
        raise InvalidPricingInputError(cost, target, message=f"Cost cannot be negative (got {cost})")
    if target is None or Decimal(target) < 0:
        raise InvalidPricingInputError(cost, target, message=f"Target cannot be negative (got {target})")
    if mode == Menu.PricingMode.MARGIN and Decimal(target) >= HUNDRED:
        raise InvalidPricingInputError(cost, target, message=f"Margin must be below 100% (got {target}%)")


def margin_price(cost, margin) -> Decimal:
    """Sale price at which `margin` percent of the price is profit."""
    validate_pricing_input(cost, margin, Menu.PricingMode.MARGIN)
    return Decimal(cost) / (1 - Decimal(margin) / HUNDRED)


def markup_price(cost, markup) -> Decimal:
    """Sale price `markup` percent above cost."""
    validate_pricing_input(cost, markup, Menu.PricingMode.MARKUP)
    return Decimal(cost) * (1 + Decimal(markup) / HUNDRED)


def effective_margin(price, cost) -> Decimal:
    """Share of the price that is profit, in percent. Zero for a zero price."""
    price = Decimal(price)
    if price <= 0:
        return ZERO
    return (price - Decimal(cost)) / price * HUNDRED


@dataclass(frozen=True)
class MenuPricingContext:
    """Everything about a menu that affects the price of its entries."""
    pricing_mode: str
    target_margin: Decimal
    fixed_fees: Decimal = ZERO
    percentage_fees: Decimal = ZERO
    apportionment_type: str = Menu.ApportionmentType.PROPORTIONAL_TO_SALES
    apportionment_value: Decimal = ZERO
    fixed_costs_total: Decimal = ZERO

    @property
    def apportions_fixed_costs(self) -> bool:
        return self.fixed_costs_total > 0 and self.apportionment_value > 0

    @property
    def percentage_share(self) -> Decimal:
        """Fixed-cost share expressed as a percentage of the sale price."""
        if self.apportions_fixed_costs and self.apportionment_type == Menu.ApportionmentType.PERCENTAGE_OF_SALE:
            return self.apportionment_value
        return ZERO

    @property
    def fixed_share(self) -> Decimal:
        """Fixed-cost share expressed as an amount per item."""
        if not self.apportions_fixed_costs:
            return ZERO
        if self.apportionment_type == Menu.ApportionmentType.FIXED_PER_PRODUCT:
            return self.apportionment_value
        if self.apportionment_type == Menu.ApportionmentType.PROPORTIONAL_TO_SALES:
            return self.fixed_costs_total / self.apportionment_value
        return ZERO

    def overhead_at(self, price) -> Decimal:
        """Fees plus fixed-cost share for one sale at `price`."""
        price = Decimal(price)
        return (
            self.fixed_fees
            + price * self.percentage_fees / HUNDRED
            + self.fixed_share
            + price * self.percentage_share / HUNDRED
        )

    def suggest_price(self, cost, target_margin=None) -> Decimal:
        """
        Suggested sale price for an item of the given cost.

        `target_margin` replaces the menu target, for entries priced at the
        target they were added with.

        Raises:
            InvalidPricingInputError: invalid target, or percentages that leave no room for a price.
        """
        if target_margin is None:
            target_margin = self.target_margin
        target_margin = Decimal(target_margin)
        validate_pricing_input(cost, target_margin, self.pricing_mode)
        target = target_margin / HUNDRED
        percentage_overhead = (self.percentage_fees + self.percentage_share) / HUNDRED
        numerator = Decimal(cost) + self.fixed_fees + self.fixed_share

        if self.pricing_mode == Menu.PricingMode.MARKUP:
            numerator = numerator * (1 + target)
            denominator = 1 - percentage_overhead
        else:
            denominator = 1 - target - percentage_overhead

        if denominator <= 0:
            raise InvalidPricingInputError(
                cost,
                target_margin,
                message=(
                    f"Target {target_margin}% plus {percentage_overhead * HUNDRED}% "
                    f"of percentage fees leaves no room for a price"
                ),
            )
        return numerator / denominator


@dataclass
class EntryPricing:
    """Computed price figures of a menu entry."""
    cost: Decimal
    suggested_price: Decimal
    total_cost: Decimal
    margin_value: Decimal
    margin_percentage: Decimal

    def as_values(self) -> dict:
        return {
            'cost': quantize_price(self.cost),
            'suggested_price': quantize_price(self.suggested_price),
            'total_cost': quantize_price(self.total_cost),
            'margin_value': quantize_price(self.margin_value),
            'margin_percentage': quantize_price(self.margin_percentage),
        }


def price_entry(entry, cost, context: MenuPricingContext, reprice=True) -> EntryPricing:
    """
    Price figures of an entry for the given item cost.

    The suggested price is recomputed only when `reprice` is set and the entry
    has no manual override, except for new entries, which always get one.
    Otherwise the stored suggestion is kept. The entry's pinned target wins
    over the menu target. Totals and margins always follow
    the effective price (override first).
    """
    cost = Decimal(cost)
    if reprice and (entry.override_price is None or entry.pk is None):
        suggested = quantize_price(context.suggest_price(cost, entry.target_margin))
    else:
        suggested = Decimal(entry.suggested_price)

    price = Decimal(entry.override_price) if entry.override_price is not None else suggested
    total_cost = cost + context.overhead_at(price)
    margin_value = price - total_cost
    return EntryPricing(
        cost=cost,
        suggested_price=suggested,
        total_cost=total_cost,
        margin_value=margin_value,
        margin_percentage=effective_margin(price, total_cost),
    )


@dataclass
class RepriceResult:
    updated: int = 0
    failed: int = 0
    errors: List[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {'updated': self.updated, 'failed': self.failed, 'errors': self.errors}


class PricingService:
    """
    Service for pricing menu entries.

    Reads stored item costs; the cascade orchestrator keeps those current and
    calls price_entry() itself with freshly computed costs.
    """

    def __init__(self, tenant):
        self.tenant = tenant
        self._context_cache = {}

    def fixed_costs_total(self) -> Decimal:
        """Sum of the workspace's active monthly fixed costs."""
        total = FixedCost.all_objects.filter(
            tenant=self.tenant,
            is_active=True,
        ).aggregate(total=Sum('value'))['total']
        return total or ZERO

    def build_context(self, menu, use_cache=True) -> MenuPricingContext:
        if use_cache and menu.pk in self._context_cache:
            return self._context_cache[menu.pk]

        fixed_fees = ZERO
        percentage_fees = ZERO
        for fee in MenuFee.objects.filter(menu=menu, is_active=True):
            if fee.fee_type == MenuFee.FeeType.FIXED:
                fixed_fees += fee.value
            else:
                percentage_fees += fee.value

        context = MenuPricingContext(
            pricing_mode=menu.pricing_mode,
            target_margin=Decimal(menu.target_margin),
            fixed_fees=fixed_fees,
            percentage_fees=percentage_fees,
            apportionment_type=menu.apportionment_type,
            apportionment_value=Decimal(menu.apportionment_value or 0),
            fixed_costs_total=self.fixed_costs_total(),
        )
        self._context_cache[menu.pk] = context
        return context

    def item_cost(self, item_type, item_id, size_option=None) -> Decimal:
        """
        Stored cost of one sold item.

        Products use their base cost scaled to the size; ingredients their
        cost per price unit; recipes their total cost.

        Raises:
            MissingComponentError: the item does not exist in this workspace.
        """
        if item_type == MenuEntry.ItemType.PRODUCT:
            product = Product.all_objects.filter(tenant=self.tenant, pk=item_id).select_related('size_group').first()
            if product is None:
                raise MissingComponentError(item_type, item_id)
            if size_option is None:
                return product.base_cost
            options = list(SizeOption.objects.filter(group_id=size_option.group_id))
            reference = reference_option(options, size_option.group)
            return size_cost(product.base_cost, size_option, reference)

        if item_type == MenuEntry.ItemType.INGREDIENT:
            ingredient = Ingredient.all_objects.filter(tenant=self.tenant, pk=item_id).first()
            if ingredient is None:
                raise MissingComponentError(item_type, item_id)
            return ingredient.average_price

        if item_type == MenuEntry.ItemType.RECIPE:
            recipe = Recipe.all_objects.filter(tenant=self.tenant, pk=item_id).first()
            if recipe is None:
                raise MissingComponentError(item_type, item_id)
            return recipe.total_cost

        raise MissingComponentError(item_type, item_id, message=f"Unknown menu item type '{item_type}'")

    @transaction.atomic
    def add_entry(self, menu, item_type, item_id, size_option=None, override_price=None) -> MenuEntry:
        """
        Put an item on a menu, priced at the menu's target.

        Raises:
            DuplicateMenuEntryError: the item (with this size) is already listed.
            MissingComponentError: the item does not exist.
            InvalidPricingInputError: the menu's target cannot price the item.
        """
        duplicate = MenuEntry.objects.filter(
            menu=menu, item_type=item_type, item_id=item_id, size_option=size_option
        ).exists()
        if duplicate:
            raise DuplicateMenuEntryError(menu, item_type, item_id)

        if size_option is not None and item_type == MenuEntry.ItemType.PRODUCT:
            product = Product.all_objects.get(tenant=self.tenant, pk=item_id)
            if product.size_group_id != size_option.group_id:
                raise MissingComponentError(
                    'size_option', size_option.pk,
                    message=f"Size '{size_option.name}' does not belong to product '{product.name}'s size group",
                )

        entry = MenuEntry(
            menu=menu,
            item_type=item_type,
            item_id=item_id,
            size_option=size_option,
            override_price=override_price,
            target_margin=menu.target_margin,
        )
        cost = self.item_cost(item_type, item_id, size_option)
        pricing = price_entry(entry, cost, self.build_context(menu))
        for name, value in pricing.as_values().items():
            setattr(entry, name, value)
        entry.save()
        logger.info(f"Added {item_type} {item_id} to menu {menu.id} at {entry.effective_price}")
        return entry

    def add_all_sizes(self, menu, product) -> List[MenuEntry]:
        """Put every size of a sized product on the menu, skipping sizes already listed."""
        if product.size_group_id is None:
            return [self.add_entry(menu, MenuEntry.ItemType.PRODUCT, product.pk)]

        entries = []
        for option in SizeOption.objects.filter(group_id=product.size_group_id):
            try:
                entries.append(self.add_entry(menu, MenuEntry.ItemType.PRODUCT, product.pk, size_option=option))
            except DuplicateMenuEntryError:
                continue
        return entries

    def refresh_entry(self, entry, reprice=True) -> MenuEntry:
        """Recompute an entry from stored item costs and save it."""
        cost = self.item_cost(entry.item_type, entry.item_id, entry.size_option)
        pricing = price_entry(entry, cost, self.build_context(entry.menu), reprice=reprice)
        MenuEntry.objects.filter(pk=entry.pk).update(**pricing.as_values())
        for name, value in pricing.as_values().items():
            setattr(entry, name, value)
        return entry

    def set_override_price(self, entry, price) -> MenuEntry:
        """Set (or clear, with None) the manual price of an entry."""
        if price is not None and Decimal(price) < 0:
            raise InvalidPricingInputError(message=f"Price cannot be negative (got {price})")
        entry.override_price = price
        entry.save(update_fields=['override_price', 'updated_at'])
        return self.refresh_entry(entry, reprice=price is None)

    def reprice_menu(self, menu, reprice=True) -> RepriceResult:
        """
        Refresh every entry of a menu; used after fee or apportionment changes.

        Entries that cannot be priced keep their previous figures and are
        reported in the result.
        """
        self._context_cache.pop(menu.pk, None)
        result = RepriceResult()
        entries = MenuEntry.objects.filter(menu=menu).select_related('size_option__group', 'menu')
        for entry in entries:
            try:
                with transaction.atomic():
                    self.refresh_entry(entry, reprice=reprice)
                result.updated += 1
            except COGSError as e:
                result.failed += 1
                result.errors.append({'entity_type': 'menu_entry', 'entity_id': entry.pk, 'reason': str(e)})
                logger.warning(f"Could not price menu entry {entry.pk}: {e}")
        return result

    @transaction.atomic
    def update_target_margin(self, menu, target_margin, *, update_existing: bool) -> RepriceResult:
        """
        Change a menu's target margin.

        Args:
            menu: The Menu to update.
            target_margin: New target in percent.
            update_existing: Re-suggest prices of existing entries at the new
                target and pin them to it. When False nothing is rewritten,
                existing entries stay pinned to their previous target and only
                entries added later use the new one. Manual override prices are never touched either way.

        Raises:
            InvalidPricingInputError: the target is out of range for the menu's mode.
        """
        validate_pricing_input(ZERO, target_margin, menu.pricing_mode)
        previous = menu.target_margin
        menu.target_margin = Decimal(target_margin)
        menu.save(update_fields=['target_margin', 'updated_at'])
        self._context_cache.pop(menu.pk, None)
        logger.info(f"Menu {menu.id} target margin {previous} -> {target_margin} (update_existing={update_existing})")

        if not update_existing:
            return RepriceResult()
        MenuEntry.objects.filter(menu=menu).update(target_margin=menu.target_margin)
        return self.reprice_menu(menu)
