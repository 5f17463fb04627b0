"""
Workspace context for tenant-owned models.

Views, tasks and commands set the current workspace; `TenantManager` filters
every query of a tenant-owned model by it.
"""
from contextlib import contextmanager
from threading import local

from django.db import models

_thread_locals = local()


def set_current_tenant(tenant):
    """
    Set the workspace of the current thread.

    Args:
        tenant: Tenant instance, or None to clear the context
    """
    _thread_locals.tenant = tenant


def get_current_tenant():
    """Return the workspace of the current thread, or None."""
    return getattr(_thread_locals, 'tenant', None)


@contextmanager
def tenant_context(tenant):
    """
    Run a block inside a workspace, restoring the previous one on exit.

    Usage:
        with tenant_context(tenant):
            Ingredient.objects.all()  # only this workspace's ingredients
    """
    previous = get_current_tenant()
    set_current_tenant(tenant)
    try:
        yield tenant
    finally:
        set_current_tenant(previous)


class TenantManager(models.Manager):
    """
    Default manager of tenant-owned models.

    FAILS CLOSED: without a workspace context the queryset is empty, so a
    missing context can never expose another workspace's costs.

    Models keep an unfiltered `all_objects = models.Manager()` next to it for
    services that pass the tenant explicitly:

        Recipe.objects.all()                      # current workspace only
        Recipe.all_objects.filter(tenant=tenant)  # explicit workspace
    """

    def get_queryset(self):
        tenant = get_current_tenant()

        if tenant:
            return super().get_queryset().filter(tenant=tenant)

        # FAIL CLOSED
        return super().get_queryset().none()
