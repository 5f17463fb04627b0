"""
Signal handlers for the COGS system.

- New workspaces get the standard units.
- Supplier entry changes cascade the ingredient's new cost once the
  surrounding transaction commits, through Celery or inline depending on
  COGS["RUN_CASCADE_ASYNC"].
"""
import logging

from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from inventory.models import SupplierEntry
from tenant.models import Tenant
from cogs.conf import cogs_settings

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Tenant)
def seed_default_units_for_tenant(sender, instance, created, **kwargs):
    """
    Seed default units when a new tenant is created.
    """
    if created:
        from measurements.services import seed_units
        seed_units(instance)


def _schedule_ingredient_cascade(entry):
    tenant_id = entry.tenant_id
    ingredient_id = entry.ingredient_id

    def run():
        from cogs.tasks import recalculate_ingredient_costs_task

        if cogs_settings.RUN_CASCADE_ASYNC:
            recalculate_ingredient_costs_task.delay(str(tenant_id), ingredient_id)
            return

        from cogs.services import CascadeOrchestrator
        tenant = Tenant.objects.get(id=tenant_id)
        CascadeOrchestrator(tenant).recalculate_for_ingredient(ingredient_id)

    transaction.on_commit(run)


@receiver(post_save, sender=SupplierEntry)
def supplier_entry_saved(sender, instance, **kwargs):
    logger.debug(f"Supplier entry {instance.pk} saved, cascading ingredient {instance.ingredient_id}")
    _schedule_ingredient_cascade(instance)


@receiver(post_delete, sender=SupplierEntry)
def supplier_entry_deleted(sender, instance, **kwargs):
    logger.debug(f"Supplier entry {instance.pk} deleted, cascading ingredient {instance.ingredient_id}")
    _schedule_ingredient_cascade(instance)
