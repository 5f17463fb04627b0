from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class Category(models.Model):
    """Grouping for products and ingredients."""
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='categories',
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'name'],
                name='unique_category_name_per_tenant',
            ),
        ]

    def __str__(self):
        return self.name


class SizeGroup(models.Model):
    """
    A set of sizes (e.g., Small / Medium / Large) a product can be sold in.

    Exactly one option of the group is the reference size: product costs are
    computed for the reference size and every other size is derived from it
    by its multiplier. The size service keeps that invariant.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='size_groups',
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Size Group")
        verbose_name_plural = _("Size Groups")
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def reference_option(self):
        return self.options.filter(is_reference=True).first()


class SizeOption(models.Model):
    """One size of a size group with its linear cost/quantity multiplier."""
    group = models.ForeignKey(
        SizeGroup,
        on_delete=models.CASCADE,
        related_name='options',
    )
    name = models.CharField(max_length=50)
    multiplier = models.DecimalField(
        max_digits=10,
        decimal_places=4,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.0001"))],
        help_text=_("Cost and quantity multiplier relative to the reference size")
    )
    is_reference = models.BooleanField(
        default=False,
        help_text=_("Reference size whose cost is computed from the product composition")
    )
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Size Option")
        verbose_name_plural = _("Size Options")
        ordering = ['group', 'sort_order', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['group'],
                condition=Q(is_reference=True),
                name='unique_reference_option_per_group',
            ),
        ]

    def __str__(self):
        marker = " *" if self.is_reference else ""
        return f"{self.group.name}: {self.name} (x{self.multiplier}){marker}"

    def clean(self):
        if self.multiplier is not None and self.multiplier <= 0:
            raise ValidationError({'multiplier': _("Multiplier must be greater than 0")})


class Product(models.Model):
    """
    A sellable item composed of ingredients, variations, recipes or other products.

    base_cost is derived by the cost engine and never edited by hand. For
    products with a size group it is the cost of the reference size.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='products',
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
    )
    size_group = models.ForeignKey(
        SizeGroup,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='products',
    )
    base_cost = models.DecimalField(
        max_digits=15,
        decimal_places=6,
        default=Decimal("0"),
        editable=False,
        help_text=_("Cost of the product (reference size when sized), derived")
    )
    available_for_sale = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ['name']
        indexes = [
            models.Index(fields=['tenant', 'size_group'], name='product_tenant_size_idx'),
        ]

    def __str__(self):
        return self.name


class ProductComposition(models.Model):
    """
    One line of a product's composition.

    component_id is a plain id resolved by component_type, so a line may point
    at a row that no longer exists. The cost engine reports such lines as
    failures instead of silently costing them at zero.
    """

    class ComponentType(models.TextChoices):
        PRODUCT = "product", _("Product")
        INGREDIENT = "ingredient", _("Ingredient")
        VARIATION = "variation", _("Ingredient Variation")
        RECIPE = "recipe", _("Recipe")

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='composition',
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
        null=True,
        blank=True,
        related_name='+',
        help_text=_("Unit of the quantity; not used for nested products")
    )
    calculated_cost = models.DecimalField(
        max_digits=15,
        decimal_places=6,
        default=Decimal("0"),
        editable=False,
    )
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Product Composition Line")
        verbose_name_plural = _("Product Composition")
        ordering = ['product', 'sort_order', 'id']
        indexes = [
            models.Index(fields=['component_type', 'component_id'], name='composition_component_idx'),
        ]

    def __str__(self):
        return f"{self.product.name}: {self.quantity} x {self.component_type}#{self.component_id}"

    def clean(self):
        if self.component_type != self.ComponentType.PRODUCT and self.unit_id is None:
            raise ValidationError({'unit': _("A unit is required for this component type")})
