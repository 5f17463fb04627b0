"""
Tests for COGS signal handlers.
"""
import pytest
from decimal import Decimal
from unittest.mock import patch

from cogs.tasks import recalculate_ingredient_costs_task
from inventory.models import Ingredient
from measurements.models import Unit
from tenant.models import Tenant


INLINE = {"COST_PRECISION": 6, "UNIT_COST_PRECISION": 12, "PRICE_PRECISION": 4, "DEFAULT_TARGET_MARGIN": Decimal("30"), "RUN_CASCADE_ASYNC": False}
ASYNC = {**INLINE, "RUN_CASCADE_ASYNC": True}


@pytest.mark.django_db
class TestTenantUnitSeeding:

    def test_new_tenant_gets_standard_units(self):
        tenant = Tenant.objects.create(name="Taco Stand", slug="tacos")

        codes = set(Unit.all_objects.filter(tenant=tenant).values_list('code', flat=True))
        assert codes == {'g', 'kg', 'mg', 'ml', 'l', 'un', 'dz'}

    def test_saving_existing_tenant_does_not_duplicate_units(self, tenant_a):
        tenant_a.name = "Pizza Place A (renamed)"
        tenant_a.save()

        assert Unit.all_objects.filter(tenant=tenant_a).count() == 7


@pytest.mark.django_db
class TestSupplierEntryCascade:
    """Supplier entry changes cascade once the transaction commits."""

    def test_new_entry_cascades_inline(self, settings, django_capture_on_commit_callbacks, flour, make_entry):
        settings.COGS = INLINE
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            make_entry(flour, "1000", "kg", "5.00")

        assert len(callbacks) == 1
        assert Ingredient.all_objects.get(pk=flour.pk).unit_cost == Decimal("0.000005")

    def test_deleted_entry_cascades_inline(self, settings, django_capture_on_commit_callbacks, flour, make_entry):
        settings.COGS = INLINE
        with django_capture_on_commit_callbacks(execute=True):
            entry = make_entry(flour, "1000", "kg", "5.00")
        with django_capture_on_commit_callbacks(execute=True):
            entry.delete()

        ingredient = Ingredient.all_objects.get(pk=flour.pk)
        assert ingredient.unit_cost == Decimal("0")
        assert ingredient.is_priced is False

    def test_new_entry_enqueues_task(self, settings, django_capture_on_commit_callbacks, tenant, flour, make_entry):
        settings.COGS = ASYNC
        with patch.object(recalculate_ingredient_costs_task, 'delay') as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                make_entry(flour, "1", "kg", "3.00")

        mock_delay.assert_called_once_with(str(tenant.id), flour.id)

    def test_nothing_runs_before_commit(self, settings, django_capture_on_commit_callbacks, flour, make_entry):
        settings.COGS = ASYNC
        with patch.object(recalculate_ingredient_costs_task, 'delay') as mock_delay:
            with django_capture_on_commit_callbacks(execute=False) as callbacks:
                make_entry(flour, "1", "kg", "3.00")

        assert len(callbacks) == 1
        mock_delay.assert_not_called()
