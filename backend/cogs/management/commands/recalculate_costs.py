"""
Management command to recalculate derived costs of a workspace.

Run after a global parameter change (labor rate, unit factors) or to repair
costs after a data import. Safe to re-run: a consistent workspace reports
0 changed.

Usage:
    python manage.py recalculate_costs joes-pizza
    python manage.py recalculate_costs joes-pizza --kind products
    python manage.py recalculate_costs joes-pizza --kind ingredients --async
"""

from django.core.management.base import BaseCommand, CommandError

from tenant.managers import tenant_context
from tenant.models import Tenant
from cogs.services import CascadeOrchestrator
from cogs.tasks import BULK_OPERATIONS, bulk_recalculation_task


class Command(BaseCommand):
    help = "Recalculate derived costs (recipes, products, variations or ingredients) of a workspace"

    def add_arguments(self, parser):
        parser.add_argument("slug", type=str, help="Workspace slug")
        parser.add_argument(
            "--kind",
            type=str,
            choices=sorted(BULK_OPERATIONS),
            default="recipes",
            help="What to recalculate; everything downstream follows",
        )
        parser.add_argument(
            "--async",
            action="store_true",
            dest="run_async",
            help="Enqueue a Celery task instead of running inline",
        )

    def handle(self, *args, **options):
        slug = options["slug"]
        kind = options["kind"]

        try:
            tenant = Tenant.objects.get(slug=slug)
        except Tenant.DoesNotExist:
            raise CommandError(f"Workspace '{slug}' not found")

        if options["run_async"]:
            task = bulk_recalculation_task.delay(str(tenant.id), kind)
            self.stdout.write(self.style.SUCCESS(f"✓ Enqueued {kind} recalculation for {slug} (task {task.id})"))
            return

        self.stdout.write(f"\n🔄 Recalculating {kind} for workspace: {tenant.name} ({tenant.slug})")

        with tenant_context(tenant):
            result = getattr(CascadeOrchestrator(tenant), BULK_OPERATIONS[kind])()

        style = self.style.SUCCESS if result["failed"] == 0 else self.style.WARNING
        self.stdout.write(style(
            f"✓ {result['status']}: {result['updated']} updated, "
            f"{result['changed']} changed, {result['failed']} failed"
        ))
        for kind_name, counts in result["downstream"].items():
            self.stdout.write(
                f"  {kind_name}: {counts['updated']} updated, {counts['changed']} changed, {counts['failed']} failed"
            )
        for error in result["errors"]:
            self.stdout.write(self.style.ERROR(
                f"  ✗ {error['entity_type']} {error['entity_id']}: {error['reason']}"
            ))
