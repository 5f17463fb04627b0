"""
Tests for the recalculate_costs management command.
"""
import pytest
from decimal import Decimal
from io import StringIO
from unittest.mock import MagicMock, patch

from django.core.management import call_command
from django.core.management.base import CommandError

from cogs.services.dependency_graph import INGREDIENT
from cogs.tasks import bulk_recalculation_task
from inventory.models import Recipe


@pytest.mark.django_db
class TestRecalculateCostsCommand:

    def test_recalculates_recipes(self, tenant, flour, flour_entry, make_recipe):
        bread = make_recipe("Bread", items=[(INGREDIENT, flour.id, "500", "g")])
        out = StringIO()

        call_command('recalculate_costs', tenant.slug, stdout=out)

        output = out.getvalue()
        assert "Recalculating recipes" in output
        assert "completed: 1 updated" in output
        assert Recipe.all_objects.get(pk=bread.pk).total_cost == Decimal("0.0025")

    def test_rerun_reports_nothing_changed(self, tenant, flour, flour_entry, make_recipe):
        make_recipe("Bread", items=[(INGREDIENT, flour.id, "500", "g")])
        call_command('recalculate_costs', tenant.slug, '--kind', 'ingredients', stdout=StringIO())
        out = StringIO()

        call_command('recalculate_costs', tenant.slug, '--kind', 'ingredients', stdout=out)

        assert "0 changed" in out.getvalue()

    def test_failures_are_listed(self, tenant, make_recipe):
        broken = make_recipe("Broken", items=[(INGREDIENT, 999999, "1", "g")])
        out = StringIO()

        call_command('recalculate_costs', tenant.slug, stdout=out)

        output = out.getvalue()
        assert "partially_failed" in output
        assert f"recipe {broken.id}: Referenced ingredient 999999 does not exist" in output

    def test_unknown_workspace(self, db):
        with pytest.raises(CommandError, match="not found"):
            call_command('recalculate_costs', 'nowhere', stdout=StringIO())

    def test_async_enqueues_task(self, tenant):
        out = StringIO()

        with patch.object(bulk_recalculation_task, 'delay', return_value=MagicMock(id="task-1")) as mock_delay:
            call_command('recalculate_costs', tenant.slug, '--kind', 'products', '--async', stdout=out)

        mock_delay.assert_called_once_with(str(tenant.id), 'products')
        assert "task-1" in out.getvalue()
