from django.contrib import admin

from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'slug',
        'labor_cost_per_hour',
        'monthly_labor_hours',
        'is_active',
        'created_at'
    ]
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'slug']
    readonly_fields = ['id', 'created_at', 'updated_at']
    prepopulated_fields = {'slug': ('name',)}
    filter_horizontal = ['members']

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'name', 'slug')
        }),
        ('Labor Costs', {
            'fields': ('labor_cost_per_hour', 'monthly_labor_hours'),
            'description': 'Changing the labor rate requires a recipe recalculation'
        }),
        ('Access', {
            'fields': ('members',)
        }),
        ('Status', {
            'fields': ('is_active', 'created_at', 'updated_at')
        }),
    )
