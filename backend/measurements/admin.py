"""
Django admin configuration for measurements models.
"""
from django.contrib import admin

from core_backend.admin_mixins import TenantScopedAdminMixin
from measurements.models import Unit


@admin.register(Unit)
class UnitAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    """
    Admin for Unit model.
    Base units are read-only once created.
    """
    list_display = ['code', 'name', 'tenant', 'measurement_type', 'is_base', 'conversion_factor']
    list_filter = ['measurement_type', 'is_base']
    search_fields = ['code', 'name', 'tenant__name']
    ordering = ['tenant', 'measurement_type', 'code']

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.is_base:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_base:
            return False
        return super().has_delete_permission(request, obj)
