"""
Shared admin mixins.
"""


class TenantScopedAdminMixin:
    """
    Admin mixin for tenant-owned models.

    The default manager of tenant-owned models fails closed without a tenant
    context, which the admin never has. Staff see every workspace's rows via
    the unfiltered manager instead.
    """
    list_select_related = ['tenant']

    def get_queryset(self, request):
        queryset = self.model.all_objects.get_queryset()
        ordering = self.get_ordering(request)
        if ordering:
            queryset = queryset.order_by(*ordering)
        return queryset
