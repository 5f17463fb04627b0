from celery import shared_task
import logging

from tenant.managers import tenant_context

logger = logging.getLogger(__name__)

BULK_OPERATIONS = {
    'recipes': 'recalculate_all_recipe_costs',
    'products': 'recalculate_all_product_costs',
    'variations': 'recalculate_all_variations',
    'ingredients': 'recalculate_all_ingredient_costs',
}


def _get_tenant(tenant_id):
    from tenant.models import Tenant
    return Tenant.objects.get(id=tenant_id)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def recalculate_ingredient_costs_task(self, tenant_id, ingredient_id):
    """
    Cascade a changed ingredient cost through variations, recipes, products
    and menu entries.

    Triggered after a supplier entry is saved or deleted.

    Args:
        tenant_id: UUID of the workspace
        ingredient_id: ID of the ingredient whose entries changed

    Returns:
        dict: The job summary
    """
    from tenant.models import Tenant
    from cogs.services import CascadeOrchestrator

    try:
        tenant = _get_tenant(tenant_id)
        logger.info(f"Cascading cost of ingredient {ingredient_id} for tenant {tenant.slug}")

        with tenant_context(tenant):
            result = CascadeOrchestrator(tenant).recalculate_for_ingredient(ingredient_id)

        logger.info(
            f"Ingredient {ingredient_id} cascade {result['status']}: "
            f"{result['updated']} updated, {result['failed']} failed"
        )
        return result

    except Tenant.DoesNotExist:
        logger.error(f"Tenant {tenant_id} not found for ingredient cascade")
        return {
            "status": "failed",
            "error": "Tenant not found",
            "tenant_id": str(tenant_id)
        }
    except Exception as exc:
        logger.error(f"Error cascading ingredient {ingredient_id}: {exc}")
        # Retry on failure
        raise self.retry(exc=exc)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def bulk_recalculation_task(self, tenant_id, kind):
    """
    Run one bulk recalculation for a workspace.

    Args:
        tenant_id: UUID of the workspace
        kind: 'recipes', 'products', 'variations' or 'ingredients'

    Returns:
        dict: The job summary
    """
    from tenant.models import Tenant
    from cogs.services import CascadeOrchestrator

    operation = BULK_OPERATIONS.get(kind)
    if operation is None:
        logger.error(f"Unknown bulk recalculation '{kind}'")
        return {
            "status": "failed",
            "error": f"Unknown recalculation kind '{kind}'",
        }

    try:
        tenant = _get_tenant(tenant_id)
        logger.info(f"Starting bulk {kind} recalculation for tenant {tenant.slug}")

        with tenant_context(tenant):
            result = getattr(CascadeOrchestrator(tenant), operation)()

        logger.info(
            f"Bulk {kind} recalculation for {tenant.slug} {result['status']}: "
            f"{result['updated']} updated, {result['failed']} failed"
        )
        return result

    except Tenant.DoesNotExist:
        logger.error(f"Tenant {tenant_id} not found for bulk {kind} recalculation")
        return {
            "status": "failed",
            "error": "Tenant not found",
            "tenant_id": str(tenant_id)
        }
    except Exception as exc:
        logger.error(f"Error in bulk {kind} recalculation for tenant {tenant_id}: {exc}")
        raise self.retry(exc=exc)
