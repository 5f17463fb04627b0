from django.contrib import admin

from core_backend.admin_mixins import TenantScopedAdminMixin
from .models import Category, SizeGroup, SizeOption, Product, ProductComposition


@admin.register(Category)
class CategoryAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant")
    search_fields = ("name",)


class SizeOptionInline(admin.TabularInline):
    """
    Inline admin for SizeOption. Reference changes made here bypass the
    size service, so the group's products are not recalculated.
    """
    model = SizeOption
    extra = 0


@admin.register(SizeGroup)
class SizeGroupAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant", "reference_option")
    search_fields = ("name",)
    inlines = [SizeOptionInline]


class ProductCompositionInline(admin.TabularInline):
    model = ProductComposition
    extra = 1
    readonly_fields = ("calculated_cost",)


@admin.register(Product)
class ProductAdmin(TenantScopedAdminMixin, admin.ModelAdmin):
    list_display = ("name", "tenant", "category", "size_group", "base_cost", "available_for_sale")
    list_filter = ("available_for_sale", "size_group")
    search_fields = ("name",)
    readonly_fields = ("base_cost",)
    inlines = [ProductCompositionInline]
