from django.contrib import admin

from core_backend.admin_mixins import TenantScopedAdminMixin
from .models import Supplier, Ingredient, IngredientVariation, SupplierEntry, Recipe, RecipeItem


@admin.register(Supplier)
class SupplierAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant", "contact", "phone")
    search_fields = ("name",)


class IngredientVariationInline(admin.TabularInline):
    model = IngredientVariation
    extra = 0
    fk_name = "ingredient"
    readonly_fields = ("yield_percentage", "unit_cost")
    exclude = ("tenant",)


@admin.register(Ingredient)
class IngredientAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant", "price_unit", "unit_cost", "average_price", "is_priced")
    list_filter = ("is_priced", "available_for_sale")
    search_fields = ("name",)
    readonly_fields = ("unit_cost", "average_price", "is_priced")


@admin.register(SupplierEntry)
class SupplierEntryAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("ingredient", "supplier", "quantity", "unit", "total_price", "date")
    list_filter = ("date",)
    search_fields = ("ingredient__name", "supplier__name")
    date_hierarchy = "date"


class RecipeItemInline(admin.TabularInline):
    """
    Inline admin for RecipeItem. This allows adding components directly
    within the Recipe admin page.
    """

    model = RecipeItem
    extra = 1


@admin.register(Recipe)
class RecipeAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant", "yield_quantity", "yield_unit", "total_cost", "cost_per_portion")
    search_fields = ("name",)
    readonly_fields = ("items_cost", "labor_cost", "total_cost", "cost_per_portion")
    inlines = [RecipeItemInline]
