"""
Measurements app - workspace unit definitions.

Every workspace owns its units. Each measurement type (weight, volume, count)
has exactly one base unit with a conversion factor of 1; every other unit
stores how many base units equal one of itself (1 kg = 1000 g).

Base units are the anchor for all cost arithmetic, so they cannot be edited
or deleted once created.
"""
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class MeasurementType(models.TextChoices):
    """Measurement types for units."""
    WEIGHT = "weight", _("Weight")
    VOLUME = "volume", _("Volume")
    COUNT = "count", _("Count")


class BaseUnitImmutableError(Exception):
    """Raised when a base unit is edited or deleted."""

    def __init__(self, unit, message=None):
        self.unit = unit
        if message is None:
            message = f"Base unit '{unit.code}' cannot be modified or deleted"
        super().__init__(message)


class Unit(models.Model):
    """
    Measurement unit, scoped to a workspace.

    conversion_factor answers "how many base units equal 1 of this unit":
    g -> 1 (base), kg -> 1000, mg -> 0.001.

    Examples: gram (g), kilogram (kg), milliliter (ml), liter (l), unit (un), dozen (dz)
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='units',
    )
    code = models.CharField(
        max_length=20,
        help_text=_("Short code for the unit, e.g., 'g', 'kg', 'ml', 'un'")
    )
    name = models.CharField(
        max_length=50,
        help_text=_("Full name of the unit, e.g., 'gram', 'kilogram', 'liter'")
    )
    measurement_type = models.CharField(
        max_length=20,
        choices=MeasurementType.choices,
        help_text=_("Measurement type of the unit: weight, volume, or count")
    )
    is_base = models.BooleanField(
        default=False,
        help_text=_("Base unit of its measurement type (conversion factor 1)")
    )
    conversion_factor = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.000001"))],
        help_text=_("How many base units equal one of this unit")
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Unit")
        verbose_name_plural = _("Units")
        ordering = ['measurement_type', '-is_base', 'conversion_factor', 'code']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'code'],
                name='unique_unit_code_per_tenant',
            ),
            models.UniqueConstraint(
                fields=['tenant', 'measurement_type'],
                condition=Q(is_base=True),
                name='unique_base_unit_per_type',
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'measurement_type'], name='unit_tenant_type_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        if self.is_base and self.conversion_factor != Decimal("1"):
            raise ValidationError({
                'conversion_factor': _("Base units must have a conversion factor of 1")
            })
        if self.conversion_factor is not None and self.conversion_factor <= 0:
            raise ValidationError({
                'conversion_factor': _("Conversion factor must be greater than 0")
            })

    def save(self, *args, **kwargs):
        if self.pk:
            stored = Unit.all_objects.filter(pk=self.pk).first()
            if stored and stored.is_base and self._differs_from(stored):
                raise BaseUnitImmutableError(stored)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.is_base:
            raise BaseUnitImmutableError(self)
        return super().delete(*args, **kwargs)

    def _differs_from(self, stored):
        return (
            self.code != stored.code
            or self.name != stored.name
            or self.measurement_type != stored.measurement_type
            or not self.is_base
            or Decimal(self.conversion_factor) != stored.conversion_factor
        )
