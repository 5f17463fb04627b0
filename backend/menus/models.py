from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class Menu(models.Model):
    """
    A price list. Each menu prices its entries in one mode:

    - margin: target is a percentage of the sale price
    - markup: target is a percentage on top of cost
    """

    class PricingMode(models.TextChoices):
        MARGIN = "margin", _("Margin on price")
        MARKUP = "markup", _("Markup on cost")

    class ApportionmentType(models.TextChoices):
        PERCENTAGE_OF_SALE = "percentage_of_sale", _("Percentage of sale price")
        FIXED_PER_PRODUCT = "fixed_per_product", _("Fixed amount per product")
        PROPORTIONAL_TO_SALES = "proportional_to_sales", _("Monthly fixed costs / expected monthly sales")

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='menus',
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    pricing_mode = models.CharField(
        max_length=10,
        choices=PricingMode.choices,
        default=PricingMode.MARGIN,
    )
    target_margin = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("30"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("99.99"))],
        help_text=_("Target margin (margin mode) or markup (markup mode), in percent")
    )
    apportionment_type = models.CharField(
        max_length=30,
        choices=ApportionmentType.choices,
        default=ApportionmentType.PROPORTIONAL_TO_SALES,
        help_text=_("How workspace fixed costs are spread over menu entries")
    )
    apportionment_value = models.DecimalField(
        max_digits=15,
        decimal_places=4,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Percent, amount or expected monthly sales volume depending on the type")
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Menu")
        verbose_name_plural = _("Menus")
        ordering = ['name']

    def __str__(self):
        return self.name

    def clean(self):
        if (
            self.pricing_mode == self.PricingMode.MARGIN
            and self.target_margin is not None
            and self.target_margin >= 100
        ):
            raise ValidationError({'target_margin': _("Margin must be below 100%")})


class MenuEntry(models.Model):
    """
    An item sold on a menu.

    suggested_price is maintained by the pricing engine. override_price is a
    manual price set by the user and is never overwritten by recalculations;
    when present it is the effective price.

    target_margin pins the target an entry is suggested at. It is set when the
    entry is added and only moves when the menu target changes with
    update_existing. Recalculations re-suggest at this target, not at the
    menu's current one.
    """

    class ItemType(models.TextChoices):
        PRODUCT = "product", _("Product")
        INGREDIENT = "ingredient", _("Ingredient")
        RECIPE = "recipe", _("Recipe")

    menu = models.ForeignKey(
        Menu,
        on_delete=models.CASCADE,
        related_name='entries',
    )
    item_type = models.CharField(
        max_length=20,
        choices=ItemType.choices,
        default=ItemType.PRODUCT,
    )
    item_id = models.PositiveBigIntegerField()
    size_option = models.ForeignKey(
        'products.SizeOption',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='menu_entries',
    )
    cost = models.DecimalField(
        max_digits=15, decimal_places=4, default=Decimal("0"), editable=False,
        help_text=_("Item cost (size-scaled), derived")
    )
    suggested_price = models.DecimalField(
        max_digits=15, decimal_places=4, default=Decimal("0"), editable=False
    )
    override_price = models.DecimalField(
        max_digits=15,
        decimal_places=4,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    target_margin = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        editable=False,
        help_text=_("Target the suggested price is computed at; empty follows the menu")
    )
    total_cost = models.DecimalField(
        max_digits=15, decimal_places=4, default=Decimal("0"), editable=False,
        help_text=_("Cost plus fees and fixed-cost share at the effective price")
    )
    margin_value = models.DecimalField(
        max_digits=15, decimal_places=4, default=Decimal("0"), editable=False
    )
    margin_percentage = models.DecimalField(
        max_digits=9, decimal_places=4, default=Decimal("0"), editable=False
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Menu Entry")
        verbose_name_plural = _("Menu Entries")
        ordering = ['menu', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['menu', 'item_type', 'item_id', 'size_option'],
                name='unique_menu_item_size',
            ),
        ]
        indexes = [
            models.Index(fields=['item_type', 'item_id'], name='menuentry_item_idx'),
        ]

    def __str__(self):
        return f"{self.menu.name}: {self.item_type}#{self.item_id}"

    @property
    def effective_price(self):
        if self.override_price is not None:
            return self.override_price
        return self.suggested_price

    @property
    def is_overridden(self):
        return self.override_price is not None


class MenuFee(models.Model):
    """A fee charged on every sale of a menu (card fee, delivery commission)."""

    class FeeType(models.TextChoices):
        FIXED = "fixed", _("Fixed amount")
        PERCENTAGE = "percentage", _("Percentage of sale price")

    menu = models.ForeignKey(
        Menu,
        on_delete=models.CASCADE,
        related_name='fees',
    )
    name = models.CharField(max_length=100)
    fee_type = models.CharField(max_length=20, choices=FeeType.choices)
    value = models.DecimalField(
        max_digits=15,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0"))],
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Menu Fee")
        verbose_name_plural = _("Menu Fees")
        ordering = ['menu', 'name']

    def __str__(self):
        suffix = "%" if self.fee_type == self.FeeType.PERCENTAGE else ""
        return f"{self.name} ({self.value}{suffix})"


class FixedCost(models.Model):
    """A monthly overhead of the workspace (rent, utilities, salaries)."""
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='fixed_costs',
    )
    name = models.CharField(max_length=200)
    value = models.DecimalField(
        max_digits=15,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Monthly amount")
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Fixed Cost")
        verbose_name_plural = _("Fixed Costs")
        ordering = ['name']

    def __str__(self):
        return f"{self.name}: {self.value}"
