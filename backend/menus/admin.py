from django.contrib import admin

from core_backend.admin_mixins import TenantScopedAdminMixin
from .models import Menu, MenuEntry, MenuFee, FixedCost


class MenuFeeInline(admin.TabularInline):
    model = MenuFee
    extra = 0


class MenuEntryInline(admin.TabularInline):
    model = MenuEntry
    extra = 0
    readonly_fields = ("cost", "suggested_price", "target_margin", "total_cost", "margin_value", "margin_percentage")


@admin.register(Menu)
class MenuAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant", "pricing_mode", "target_margin", "apportionment_type", "is_active")
    list_filter = ("pricing_mode", "is_active")
    search_fields = ("name",)
    inlines = [MenuFeeInline, MenuEntryInline]


@admin.register(FixedCost)
class FixedCostAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant", "value", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)
