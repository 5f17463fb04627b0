"""
Cascade recalculation.

Every derived cost (ingredient and variation unit costs, recipe totals,
product base costs, menu entry prices) is written here and nowhere else.

A job loads a snapshot of the workspace, builds the cost graph, and walks the
affected part of it in topological order (Kahn levels, leaves first), so a
consumer is never computed before all of its in-scope components. Components
outside the scope contribute their stored values.

Failures are isolated per entity: the error is recorded, the entity keeps its
previous values, and everything consuming it in the same job is failed too
instead of being computed from stale numbers. Affected menu entries are
re-priced last; manual override prices are never touched.

Jobs of one workspace are serialized by locking the tenant row for the whole
job. Every entity write runs in its own savepoint.
"""
import logging
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from cogs.conf import quantize_cost, quantize_price, quantize_unit_cost
from cogs.exceptions import (
    COGSError,
    CyclicDependencyError,
    InvalidJobTransitionError,
    MissingComponentError,
)
from cogs.services.component_costs import ComponentCostTable
from cogs.services.dependency_graph import (
    ComponentRef,
    CostGraph,
    INGREDIENT,
    VARIATION,
    RECIPE,
    PRODUCT,
)
from cogs.services.ingredient_cost_service import (
    IngredientCostResult,
    resolve_from_entry,
    resolve_variation,
)
from cogs.services.pricing_service import PricingService, price_entry
from cogs.services.product_costing import calculate_product_cost, reference_option, size_cost
from cogs.services.recipe_costing import WorkspaceCostConfig, calculate_recipe_cost
from inventory.models import Ingredient, IngredientVariation, Recipe, RecipeItem, SupplierEntry
from menus.models import MenuEntry
from products.models import Product, ProductComposition, SizeOption
from tenant.models import Tenant

logger = logging.getLogger(__name__)

MENU_ENTRY = "menu_entry"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIALLY_FAILED = "partially_failed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.RUNNING, JobStatus.CANCELLED},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.PARTIALLY_FAILED, JobStatus.CANCELLED},
    JobStatus.COMPLETED: set(),
    JobStatus.PARTIALLY_FAILED: set(),
    JobStatus.CANCELLED: set(),
}


class CancellationToken:
    """Cooperative cancellation flag, checked by the orchestrator between entities."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class JobCancelled(Exception):
    """Raised inside a job to roll back its transaction."""
    pass


@dataclass
class RecalculationJob:
    """One run of the orchestrator, with its counters and outcome."""
    kind: str
    primary_kind: Optional[str] = None
    dry_run: bool = False
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: JobStatus = JobStatus.PENDING
    updated: int = 0
    failed: int = 0
    changed: int = 0
    errors: List[dict] = field(default_factory=list)
    downstream: Dict[str, Dict[str, int]] = field(
        default_factory=lambda: defaultdict(lambda: {'updated': 0, 'failed': 0, 'changed': 0})
    )
    created_at: object = field(default_factory=timezone.now)
    started_at: object = None
    finished_at: object = None
    # Computed results and failures by entity, for single-entity callers
    results: Dict[ComponentRef, object] = field(default_factory=dict)
    failures: Dict[ComponentRef, Exception] = field(default_factory=dict)
    # Old and new stored values of every entity whose values changed
    changes: List[dict] = field(default_factory=list)

    def transition(self, new_status: JobStatus):
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidJobTransitionError(self, new_status)
        self.status = new_status
        if new_status == JobStatus.RUNNING:
            self.started_at = timezone.now()
        elif not ALLOWED_TRANSITIONS[new_status]:
            self.finished_at = timezone.now()

    def _counts_as_primary(self, entity_type) -> bool:
        return self.primary_kind is None or entity_type == self.primary_kind

    def record_success(self, entity_type, entity_id, result, changed):
        if entity_type != MENU_ENTRY:
            self.results[ComponentRef(entity_type, entity_id)] = result
        if self._counts_as_primary(entity_type):
            self.updated += 1
            if changed:
                self.changed += 1
        else:
            self.downstream[entity_type]['updated'] += 1
            if changed:
                self.downstream[entity_type]['changed'] += 1

    def record_failure(self, entity_type, entity_id, error):
        if entity_type != MENU_ENTRY:
            self.failures[ComponentRef(entity_type, entity_id)] = error
        if self._counts_as_primary(entity_type):
            self.failed += 1
        else:
            self.downstream[entity_type]['failed'] += 1
        self.errors.append({
            'entity_type': entity_type,
            'entity_id': entity_id,
            'reason': str(error),
        })

    def as_dict(self) -> dict:
        return {
            'job_id': self.job_id,
            'status': self.status.value,
            'updated': self.updated,
            'failed': self.failed,
            'changed': self.changed,
            'errors': list(self.errors),
            'downstream': {kind: dict(counts) for kind, counts in self.downstream.items()},
        }


class WorkspaceSnapshot:
    """Everything a job reads, loaded once at the start of the job."""

    def __init__(self, tenant):
        self.tenant = tenant

        self.ingredients = {
            ingredient.id: ingredient
            for ingredient in Ingredient.all_objects.filter(tenant=tenant).select_related('price_unit')
        }

        self.latest_entries = {}
        entries = SupplierEntry.all_objects.filter(tenant=tenant).select_related('unit').order_by(
            'ingredient_id', '-date', '-created_at', '-id'
        )
        for entry in entries:
            self.latest_entries.setdefault(entry.ingredient_id, entry)

        self.variations = {
            variation.id: variation
            for variation in IngredientVariation.all_objects.filter(tenant=tenant).select_related(
                'ingredient__price_unit', 'input_unit', 'output_unit'
            )
        }

        self.recipes = {
            recipe.id: recipe
            for recipe in Recipe.all_objects.filter(tenant=tenant).select_related('yield_unit')
        }
        self.recipe_items = defaultdict(list)
        for item in RecipeItem.objects.filter(recipe__tenant=tenant).select_related('unit'):
            self.recipe_items[item.recipe_id].append(item)

        self.products = {
            product.id: product
            for product in Product.all_objects.filter(tenant=tenant).select_related('size_group')
        }
        self.product_lines = defaultdict(list)
        for line in ProductComposition.objects.filter(product__tenant=tenant).select_related('unit'):
            self.product_lines[line.product_id].append(line)

        self.size_options = defaultdict(list)
        for option in SizeOption.objects.filter(group__tenant=tenant).select_related('group'):
            self.size_options[option.group_id].append(option)

    def refs(self, kind) -> Set[ComponentRef]:
        rows = {
            INGREDIENT: self.ingredients,
            VARIATION: self.variations,
            RECIPE: self.recipes,
            PRODUCT: self.products,
        }[kind]
        return {ComponentRef(kind, pk) for pk in rows}

    def build_graph(self) -> CostGraph:
        graph = CostGraph()
        for kind in (INGREDIENT, VARIATION, RECIPE, PRODUCT):
            for ref in self.refs(kind):
                graph.add_node(ref)
        for variation in self.variations.values():
            graph.add_edge(ComponentRef(INGREDIENT, variation.ingredient_id), ComponentRef(VARIATION, variation.id))
        for recipe_id, items in self.recipe_items.items():
            for item in items:
                graph.add_edge(ComponentRef(item.component_type, item.component_id), ComponentRef(RECIPE, recipe_id))
        for product_id, lines in self.product_lines.items():
            for line in lines:
                graph.add_edge(ComponentRef(line.component_type, line.component_id), ComponentRef(PRODUCT, product_id))
        return graph

    def build_cost_table(self) -> ComponentCostTable:
        """Cost table seeded from stored values."""
        table = ComponentCostTable()
        for ingredient in self.ingredients.values():
            table.set_ingredient(ingredient.id, ingredient.unit_cost, ingredient.price_unit, ingredient.is_priced)
        for variation in self.variations.values():
            ingredient = variation.ingredient
            table.set_variation(variation.id, variation.unit_cost, ingredient.price_unit, ingredient.is_priced)
        for recipe in self.recipes.values():
            table.set_recipe(recipe.id, recipe.cost_per_portion, recipe.total_cost, recipe.yield_unit)
        for product in self.products.values():
            table.set_product(product.id, product.base_cost)
        return table


def _changed_values(instance, values: dict) -> dict:
    """Subset of `values` that differs from what `instance` holds."""
    return {name: value for name, value in values.items() if getattr(instance, name) != value}


class CascadeOrchestrator:
    """
    Recomputes derived costs of a workspace in dependency order.

    Bulk operations return the job summary dict:
    {job_id, status, updated, failed, changed, errors, downstream}.
    """

    def __init__(self, tenant, cancel_token: Optional[CancellationToken] = None, config=None):
        self.tenant = tenant
        self.cancel_token = cancel_token
        self.config = config

    # Bulk operations

    def recalculate_all_recipe_costs(self) -> dict:
        """Recompute every recipe, then the products and menu entries using them."""
        job = RecalculationJob(kind='all_recipes', primary_kind=RECIPE)
        return self._execute(job, lambda snapshot: snapshot.refs(RECIPE)).as_dict()

    def recalculate_all_product_costs(self) -> dict:
        """Recompute every product and re-price the menu entries selling them."""
        job = RecalculationJob(kind='all_products', primary_kind=PRODUCT)
        return self._execute(job, lambda snapshot: snapshot.refs(PRODUCT)).as_dict()

    def recalculate_all_variations(self) -> dict:
        """Recompute every variation's yield and cost, then everything consuming them."""
        job = RecalculationJob(kind='all_variations', primary_kind=VARIATION)
        return self._execute(job, lambda snapshot: snapshot.refs(VARIATION)).as_dict()

    def recalculate_all_ingredient_costs(self) -> dict:
        """Re-resolve every ingredient from its supplier entries and cascade the whole workspace."""
        job = RecalculationJob(kind='all_ingredients', primary_kind=INGREDIENT)
        return self._execute(job, lambda snapshot: snapshot.refs(INGREDIENT)).as_dict()

    # Triggered cascades

    def recalculate_for_ingredient(self, ingredient_id) -> dict:
        """Cascade from one ingredient (new or deleted supplier entry)."""
        job = RecalculationJob(kind='ingredient')
        ref = ComponentRef(INGREDIENT, ingredient_id)
        return self._execute(job, lambda snapshot: {ref}).as_dict()

    def recalculate_for_size_group(self, group_id) -> dict:
        """Re-run products of a size group and re-price all of their sizes."""
        job = RecalculationJob(kind='size_group', primary_kind=PRODUCT)

        def targets(snapshot):
            return {
                ComponentRef(PRODUCT, product.id)
                for product in snapshot.products.values()
                if product.size_group_id == group_id
            }

        return self._execute(job, targets).as_dict()

    def simulate_ingredient_costs(self, overrides: Dict[int, Decimal]) -> RecalculationJob:
        """
        Cascade hypothetical ingredient unit costs without writing anything.

        The returned job's `changes` lists old and new values of every
        entity that would change.
        """
        job = RecalculationJob(kind='simulation', dry_run=True)
        refs = {ComponentRef(INGREDIENT, ingredient_id) for ingredient_id in overrides}
        return self._execute(job, lambda snapshot: refs, overrides=overrides)

    # Single entities

    def recalculate_recipe(self, recipe_id):
        """
        Recompute one recipe and everything downstream of it.

        Everything it uses (ingredients, variations, sub-recipes) is resolved
        again first so the result never reads a stale nested cost.

        Returns:
            RecipeCostResult of the recipe.

        Raises:
            COGSError: the recipe itself could not be costed.
        """
        ref = ComponentRef(RECIPE, recipe_id)
        job = RecalculationJob(kind='recipe', primary_kind=RECIPE)
        self._execute(job, lambda snapshot: {ref}, include_upstream=True)
        return self._single_result(job, ref)

    def recalculate_product(self, product_id) -> Decimal:
        """Recompute one product (reference size when sized) and return its base cost."""
        ref = ComponentRef(PRODUCT, product_id)
        job = RecalculationJob(kind='product', primary_kind=PRODUCT)
        self._execute(job, lambda snapshot: {ref}, include_upstream=True)
        return quantize_cost(self._single_result(job, ref).base_cost)

    def recalculate_product_for_size(self, product_id, size_option_id) -> Decimal:
        """
        Cost of one size of a product, derived from the freshly computed reference cost.

        Raises:
            MissingComponentError: the option is not a size of the product.
            OrphanedSizeReferenceError: the size group has no single reference.
        """
        base_cost = self.recalculate_product(product_id)
        product = Product.all_objects.select_related('size_group').get(tenant=self.tenant, pk=product_id)
        option = SizeOption.objects.filter(pk=size_option_id, group_id=product.size_group_id).first()
        if product.size_group_id is None or option is None:
            raise MissingComponentError(
                'size_option', size_option_id,
                message=f"Size option {size_option_id} is not a size of product '{product.name}'",
            )
        options = list(product.size_group.options.all())
        reference = reference_option(options, product.size_group)
        return quantize_cost(size_cost(base_cost, option, reference))

    # Internal

    def _single_result(self, job, ref):
        if ref in job.failures:
            raise job.failures[ref]
        if ref not in job.results:
            raise MissingComponentError(ref.kind, ref.id)
        return job.results[ref]

    def _check_cancelled(self):
        if self.cancel_token is not None and self.cancel_token.is_cancelled:
            raise JobCancelled()

    def _execute(
        self,
        job: RecalculationJob,
        select_targets: Callable[[WorkspaceSnapshot], Iterable[ComponentRef]],
        include_upstream: bool = False,
        overrides: Optional[Dict[int, Decimal]] = None,
    ) -> RecalculationJob:
        """
        Run a job.

        Args:
            job: The job to run; must be PENDING.
            select_targets: Picks the entities that changed from the snapshot.
            include_upstream: Also recompute everything the targets consume.
            overrides: Ingredient unit costs to use instead of resolving them.
        """
        job.dry_run = job.dry_run or bool(overrides)
        job.transition(JobStatus.RUNNING)
        logger.info(f"Starting {job.kind} recalculation {job.job_id} for tenant {self.tenant.slug}")

        try:
            with transaction.atomic():
                # Serializes jobs of the same workspace
                tenant = Tenant.objects.select_for_update().get(pk=self.tenant.pk)
                config = self.config or WorkspaceCostConfig.from_tenant(tenant)

                snapshot = WorkspaceSnapshot(tenant)
                graph = snapshot.build_graph()
                table = snapshot.build_cost_table()

                targets = set(select_targets(snapshot))
                scope = set(targets) | graph.downstream_of(*targets)
                if include_upstream:
                    for target in targets:
                        scope |= graph.upstream_of(target)
                # Dangling references are left to their consumers, which fail
                # with MissingComponentError when they look them up
                missing = {ref for ref in scope if not table.has(ref)}
                for ref in sorted(missing & targets):
                    job.record_failure(ref.kind, ref.id, MissingComponentError(ref.kind, ref.id))
                scope -= missing

                levels, blocked = graph.partition_acyclic(scope)
                if blocked:
                    cycle_error = CyclicDependencyError(graph.find_cycle() or sorted(blocked))
                    for ref in sorted(blocked):
                        job.record_failure(ref.kind, ref.id, cycle_error)

                failed = (missing & targets) | blocked
                computed = set()
                for level in levels:
                    for ref in level:
                        self._check_cancelled()
                        if self._process_node(job, ref, graph, snapshot, table, config, failed, overrides):
                            computed.add(ref)
                        else:
                            failed.add(ref)

                self._reprice_menu_entries(job, computed, snapshot, table)

                if job.dry_run:
                    transaction.set_rollback(True)
        except JobCancelled:
            job.transition(JobStatus.CANCELLED)
            logger.info(f"Recalculation {job.job_id} cancelled, changes rolled back")
            return job

        job.transition(JobStatus.PARTIALLY_FAILED if job.errors else JobStatus.COMPLETED)
        logger.info(
            f"Finished {job.kind} recalculation {job.job_id}: {job.updated} updated, "
            f"{job.failed} failed, {job.changed} changed"
        )
        return job

    def _process_node(self, job, ref, graph, snapshot, table, config, failed, overrides) -> bool:
        failed_components = sorted(graph.components_of(ref) & failed)
        if failed_components:
            upstream = failed_components[0]
            job.record_failure(ref.kind, ref.id, COGSError(f"upstream {upstream.kind} {upstream.id} failed"))
            return False

        try:
            result, instance = self._compute(ref, snapshot, table, config, overrides)
            values = result.as_values()
            changes = _changed_values(instance, values)
            if changes and not job.dry_run:
                with transaction.atomic():
                    self._persist(ref, instance, values, result, snapshot)
        except (COGSError, DatabaseError) as e:
            logger.warning(f"Failed to recalculate {ref.kind} {ref.id}: {e}")
            job.record_failure(ref.kind, ref.id, e)
            return False

        if changes:
            job.changes.append({
                'entity_type': ref.kind,
                'entity_id': ref.id,
                'name': getattr(instance, 'name', ''),
                'old': {name: getattr(instance, name) for name in changes},
                'new': changes,
            })
        self._update_table(ref, instance, values, result, table)
        job.record_success(ref.kind, ref.id, result, bool(changes))
        return True

    def _compute(self, ref, snapshot, table, config, overrides):
        if ref.kind == INGREDIENT:
            ingredient = snapshot.ingredients[ref.id]
            if overrides and ref.id in overrides:
                unit_cost = quantize_unit_cost(overrides[ref.id])
                result = IngredientCostResult(
                    ingredient_id=ingredient.id,
                    unit_cost=unit_cost,
                    average_price=unit_cost * ingredient.price_unit.conversion_factor,
                    is_priced=True,
                )
            else:
                result = resolve_from_entry(ingredient, snapshot.latest_entries.get(ref.id))
            return result, ingredient

        if ref.kind == VARIATION:
            variation = snapshot.variations[ref.id]
            ingredient_cost = table.cost_per_base_unit(ComponentRef(INGREDIENT, variation.ingredient_id))
            return resolve_variation(variation, ingredient_cost), variation

        if ref.kind == RECIPE:
            recipe = snapshot.recipes[ref.id]
            items = snapshot.recipe_items.get(ref.id, [])
            return calculate_recipe_cost(recipe, items, table, config), recipe

        if ref.kind == PRODUCT:
            product = snapshot.products[ref.id]
            lines = snapshot.product_lines.get(ref.id, [])
            return calculate_product_cost(product, lines, table), product

        raise MissingComponentError(ref.kind, ref.id, message=f"Unknown component type '{ref.kind}'")

    def _persist(self, ref, instance, values, result, snapshot):
        now = timezone.now()
        model = {
            INGREDIENT: Ingredient,
            VARIATION: IngredientVariation,
            RECIPE: Recipe,
            PRODUCT: Product,
        }[ref.kind]
        model.all_objects.filter(pk=ref.id).update(updated_at=now, **values)

        if ref.kind == PRODUCT:
            lines = snapshot.product_lines.get(ref.id, [])
            for line, line_cost in zip(lines, result.lines):
                cost = quantize_cost(line_cost.cost)
                if line.calculated_cost != cost:
                    ProductComposition.objects.filter(pk=line.pk).update(calculated_cost=cost)

    def _update_table(self, ref, instance, values, result, table):
        for name, value in values.items():
            setattr(instance, name, value)

        if ref.kind == INGREDIENT:
            table.set_ingredient(ref.id, values['unit_cost'], instance.price_unit, values['is_priced'])
        elif ref.kind == VARIATION:
            table.set_variation(
                ref.id,
                values['unit_cost'],
                instance.ingredient.price_unit,
                table.is_priced(ComponentRef(INGREDIENT, instance.ingredient_id)),
            )
        elif ref.kind == RECIPE:
            table.set_recipe(
                ref.id,
                values['cost_per_portion'],
                values['total_cost'],
                instance.yield_unit,
                is_priced=not result.has_unpriced_components,
            )
        elif ref.kind == PRODUCT:
            table.set_product(ref.id, values['base_cost'], is_priced=not result.has_unpriced_components)

    def _entry_item_cost(self, entry, snapshot, table) -> Decimal:
        if entry.item_type == MenuEntry.ItemType.PRODUCT:
            base_cost = table.cost_per_base_unit(ComponentRef(PRODUCT, entry.item_id))
            if entry.size_option_id is None:
                return base_cost
            option = entry.size_option
            reference = reference_option(snapshot.size_options.get(option.group_id, []), option.group)
            return size_cost(base_cost, option, reference)
        if entry.item_type == MenuEntry.ItemType.INGREDIENT:
            return table.sale_unit_cost(ComponentRef(INGREDIENT, entry.item_id))
        return table.sale_unit_cost(ComponentRef(RECIPE, entry.item_id))

    def _reprice_menu_entries(self, job, computed, snapshot, table):
        """Re-price the menu entries selling any successfully recomputed item."""
        sold = defaultdict(set)
        for ref in computed:
            if ref.kind in (INGREDIENT, RECIPE, PRODUCT):
                sold[ref.kind].add(ref.id)
        if not sold:
            return

        condition = Q()
        for kind, ids in sold.items():
            condition |= Q(item_type=kind, item_id__in=ids)

        entries = MenuEntry.objects.filter(condition, menu__tenant=self.tenant).select_related(
            'menu', 'size_option__group'
        )
        pricing = PricingService(self.tenant)
        for entry in entries:
            try:
                cost = quantize_price(self._entry_item_cost(entry, snapshot, table))
                values = price_entry(entry, cost, pricing.build_context(entry.menu)).as_values()
                changes = _changed_values(entry, values)
                if changes and not job.dry_run:
                    with transaction.atomic():
                        MenuEntry.objects.filter(pk=entry.pk).update(updated_at=timezone.now(), **values)
            except (COGSError, DatabaseError) as e:
                logger.warning(f"Failed to re-price menu entry {entry.pk}: {e}")
                job.record_failure(MENU_ENTRY, entry.pk, e)
                continue

            if changes:
                job.changes.append({
                    'entity_type': MENU_ENTRY,
                    'entity_id': entry.pk,
                    'name': str(entry),
                    'old': {name: getattr(entry, name) for name in changes},
                    'new': changes,
                    'effective_price': entry.effective_price,
                })
            job.record_success(MENU_ENTRY, entry.pk, values, bool(changes))
