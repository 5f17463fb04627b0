import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Tenant(models.Model):
    """
    Root entity for multi-tenancy.
    Each restaurant workspace is a tenant.

    The workspace also acts as the configuration provider for cost
    calculations: labor rate and monthly labor hours are read from here and
    handed to the aggregators as an explicit config value.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        help_text="Display name for the workspace (e.g., Joe's Pizza)"
    )
    slug = models.SlugField(
        unique=True,
        help_text="URL-safe identifier used by the API (e.g., joes-pizza)"
    )

    # Labor configuration used by recipe costing
    labor_cost_per_hour = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Hourly labor cost applied to recipe preparation time"
    )
    monthly_labor_hours = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Total labor hours per month (informational, used for overhead reports)"
    )

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='workspaces',
        help_text="Users allowed to manage this workspace's costs"
    )

    # Status
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive tenants cannot access the system"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['name']
        indexes = [
            models.Index(fields=['slug'], name='tenant_slug_idx'),
            models.Index(fields=['is_active'], name='tenant_active_idx'),
        ]

    def __str__(self):
        return self.name

    def has_member(self, user):
        """Check whether the user may act on this workspace."""
        if not user or not user.is_authenticated:
            return False
        if user.is_staff:
            return True
        return self.members.filter(pk=user.pk).exists()
