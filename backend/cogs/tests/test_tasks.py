"""
Tests for COGS Celery tasks.

Tasks run eagerly through .apply(); no broker is needed.
"""
import uuid
import pytest
from decimal import Decimal

from cogs.services.dependency_graph import INGREDIENT
from cogs.tasks import bulk_recalculation_task, recalculate_ingredient_costs_task
from inventory.models import Ingredient, Recipe
from tenant.managers import get_current_tenant


@pytest.mark.django_db
class TestRecalculateIngredientCostsTask:

    def test_cascades_ingredient(self, tenant, flour, flour_entry, make_recipe):
        bread = make_recipe("Bread", items=[(INGREDIENT, flour.id, "500", "g")])

        result = recalculate_ingredient_costs_task.apply(args=[str(tenant.id), flour.id]).get()

        assert result['status'] == "completed"
        assert result['failed'] == 0
        assert Ingredient.all_objects.get(pk=flour.pk).unit_cost == Decimal("0.000005")
        assert Recipe.all_objects.get(pk=bread.pk).total_cost == Decimal("0.0025")

    def test_restores_tenant_context(self, tenant, flour, flour_entry):
        recalculate_ingredient_costs_task.apply(args=[str(tenant.id), flour.id]).get()

        assert get_current_tenant() == tenant

    def test_missing_tenant(self, db):
        missing = str(uuid.uuid4())

        result = recalculate_ingredient_costs_task.apply(args=[missing, 1]).get()

        assert result == {"status": "failed", "error": "Tenant not found", "tenant_id": missing}


@pytest.mark.django_db
class TestBulkRecalculationTask:

    def test_runs_requested_operation(self, tenant, flour, flour_entry, make_recipe):
        make_recipe("Bread", items=[(INGREDIENT, flour.id, "500", "g")])
        make_recipe("Roll", items=[(INGREDIENT, flour.id, "80", "g")])

        result = bulk_recalculation_task.apply(args=[str(tenant.id), 'ingredients']).get()

        assert result['status'] == "completed"
        assert result['updated'] == 1
        assert result['downstream']['recipe'] == {'updated': 2, 'failed': 0, 'changed': 2}

    def test_unknown_kind(self, tenant):
        result = bulk_recalculation_task.apply(args=[str(tenant.id), 'everything']).get()

        assert result['status'] == "failed"
        assert "everything" in result['error']

    def test_missing_tenant(self, db):
        result = bulk_recalculation_task.apply(args=[str(uuid.uuid4()), 'recipes']).get()

        assert result['status'] == "failed"
        assert result['error'] == "Tenant not found"
