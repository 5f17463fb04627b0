from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class Supplier(models.Model):
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='suppliers',
    )
    name = models.CharField(max_length=200)
    contact = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Supplier")
        verbose_name_plural = _("Suppliers")
        ordering = ['name']

    def __str__(self):
        return self.name


class Ingredient(models.Model):
    """
    A purchasable raw material.

    unit_cost is the current cost per BASE unit of the ingredient's
    measurement type (per gram, per milliliter, per unit). It is derived from
    the most recent supplier entry and never edited by hand. An ingredient
    without entries costs 0 and is flagged as unpriced.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='ingredients',
    )
    name = models.CharField(max_length=200)
    category = models.ForeignKey(
        'products.Category',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ingredients',
    )
    price_unit = models.ForeignKey(
        'measurements.Unit',
        on_delete=models.PROTECT,
        related_name='+',
        help_text=_("Unit prices are displayed in; defines the measurement type")
    )
    unit_cost = models.DecimalField(
        max_digits=24,
        decimal_places=12,
        default=Decimal("0"),
        editable=False,
        help_text=_("Current cost per base unit, derived from supplier entries")
    )
    average_price = models.DecimalField(
        max_digits=15,
        decimal_places=4,
        default=Decimal("0"),
        editable=False,
        help_text=_("Current cost per price unit, derived")
    )
    is_priced = models.BooleanField(
        default=False,
        editable=False,
        help_text=_("False while the ingredient has no supplier entries")
    )
    available_for_sale = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Ingredient")
        verbose_name_plural = _("Ingredients")
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def measurement_type(self):
        return self.price_unit.measurement_type


class IngredientVariation(models.Model):
    """
    A processed form of an ingredient (peeled, trimmed, portioned).

    The yield compares what comes out with what goes in, both in base units:
    1 kg of onions producing 900 g peeled is a 90% yield, so peeled onion
    costs ingredient.unit_cost / 0.9 per gram.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='ingredient_variations',
    )
    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.CASCADE,
        related_name='variations',
    )
    name = models.CharField(max_length=200)
    input_quantity = models.DecimalField(
        max_digits=15,
        decimal_places=6,
        validators=[MinValueValidator(Decimal("0.000001"))],
    )
    input_unit = models.ForeignKey(
        'measurements.Unit',
        on_delete=models.PROTECT,
        related_name='+',
    )
    output_quantity = models.DecimalField(
        max_digits=15,
        decimal_places=6,
        validators=[MinValueValidator(Decimal("0.000001"))],
    )
    output_unit = models.ForeignKey(
        'measurements.Unit',
        on_delete=models.PROTECT,
        related_name='+',
    )
    yield_percentage = models.DecimalField(
        max_digits=9,
        decimal_places=4,
        default=Decimal("100"),
        editable=False,
    )
    unit_cost = models.DecimalField(
        max_digits=24,
        decimal_places=12,
        default=Decimal("0"),
        editable=False,
        help_text=_("Cost per base unit of the processed ingredient, derived")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Ingredient Variation")
        verbose_name_plural = _("Ingredient Variations")
        ordering = ['ingredient', 'name']

    def __str__(self):
        return f"{self.ingredient.name} - {self.name}"

    @property
    def measurement_type(self):
        return self.ingredient.measurement_type


class SupplierEntry(models.Model):
    """
    One purchase of an ingredient. The most recent entry (by date, then by
    creation time) sets the ingredient's current cost.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='supplier_entries',
    )
    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.CASCADE,
        related_name='entries',
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='entries',
    )
    quantity = models.DecimalField(
        max_digits=15,
        decimal_places=6,
        validators=[MinValueValidator(Decimal("0.000001"))],
    )
    unit = models.ForeignKey(
        'measurements.Unit',
        on_delete=models.PROTECT,
        related_name='+',
    )
    total_price = models.DecimalField(
        max_digits=15,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0"))],
    )
    date = models.DateField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Supplier Entry")
        verbose_name_plural = _("Supplier Entries")
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['ingredient', '-date', '-created_at'], name='entry_latest_idx'),
        ]

    def __str__(self):
        return f"{self.ingredient.name}: {self.quantity} {self.unit.code} for {self.total_price} ({self.date})"

    def clean(self):
        if self.quantity is not None and self.quantity <= 0:
            raise ValidationError({'quantity': _("Quantity must be greater than 0")})
        if self.total_price is not None and self.total_price < 0:
            raise ValidationError({'total_price': _("Total price cannot be negative")})


class Recipe(models.Model):
    """
    A preparation made from ingredients, variations and other recipes.

    total_cost = items_cost + labor_cost, cost_per_portion = total_cost /
    yield_quantity (per yield unit). All cost fields are derived by the cost
    engine.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='recipes',
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    yield_quantity = models.DecimalField(
        max_digits=15,
        decimal_places=6,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.000001"))],
    )
    yield_unit = models.ForeignKey(
        'measurements.Unit',
        on_delete=models.PROTECT,
        related_name='+',
    )
    prep_time_minutes = models.PositiveIntegerField(null=True, blank=True)
    items_cost = models.DecimalField(
        max_digits=15, decimal_places=6, default=Decimal("0"), editable=False
    )
    labor_cost = models.DecimalField(
        max_digits=15, decimal_places=6, default=Decimal("0"), editable=False
    )
    total_cost = models.DecimalField(
        max_digits=15, decimal_places=6, default=Decimal("0"), editable=False
    )
    cost_per_portion = models.DecimalField(
        max_digits=15, decimal_places=6, default=Decimal("0"), editable=False
    )
    available_for_sale = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Recipe")
        verbose_name_plural = _("Recipes")
        ordering = ['name']

    def __str__(self):
        return self.name


class RecipeItem(models.Model):
    """
    One line of a recipe. Sub-recipes make the recipe graph a DAG; cycles are
    rejected when items are written.
    """

    class ComponentType(models.TextChoices):
        INGREDIENT = "ingredient", _("Ingredient")
        VARIATION = "variation", _("Ingredient Variation")
        RECIPE = "recipe", _("Recipe")

    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name='items',
    )
    component_type = models.CharField(max_length=20, choices=ComponentType.choices)
    component_id = models.PositiveBigIntegerField()
    quantity = models.DecimalField(
        max_digits=15,
        decimal_places=6,
        validators=[MinValueValidator(Decimal("0.000001"))],
    )
    unit = models.ForeignKey(
        'measurements.Unit',
        on_delete=models.PROTECT,
        related_name='+',
    )
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Recipe Item")
        verbose_name_plural = _("Recipe Items")
        ordering = ['recipe', 'sort_order', 'id']
        indexes = [
            models.Index(fields=['component_type', 'component_id'], name='recipeitem_component_idx'),
        ]

    def __str__(self):
        return f"{self.recipe.name}: {self.quantity} {self.unit.code} {self.component_type}#{self.component_id}"
