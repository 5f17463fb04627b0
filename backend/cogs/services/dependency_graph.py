"""
Cost dependency graph.

Nodes are component references (kind, id); an edge A -> B means B consumes A,
so B's cost depends on A's. Ingredients and variations are leaves, recipes
and products are interior nodes.

Recalculation walks the graph in topological order instead of recursing
through compositions, which bounds recursion depth and turns cycle detection
into an operation of its own.
"""
from collections import defaultdict, deque
from typing import Dict, Iterable, List, NamedTuple, Optional, Set

from cogs.exceptions import CyclicDependencyError


class ComponentRef(NamedTuple):
    """Tagged reference to a costed entity."""
    kind: str
    id: int

    def __str__(self):
        return f"{self.kind}#{self.id}"


INGREDIENT = "ingredient"
VARIATION = "variation"
RECIPE = "recipe"
PRODUCT = "product"


class CostGraph:
    """Directed graph of cost dependencies (component -> consumer)."""

    def __init__(self):
        self._consumers: Dict[ComponentRef, Set[ComponentRef]] = defaultdict(set)
        self._components: Dict[ComponentRef, Set[ComponentRef]] = defaultdict(set)
        self._nodes: Set[ComponentRef] = set()

    @classmethod
    def for_tenant(cls, tenant):
        """Build the graph from the workspace's recipe items, composition lines and variations."""
        from inventory.models import IngredientVariation, RecipeItem
        from products.models import ProductComposition

        graph = cls()

        variations = IngredientVariation.all_objects.filter(tenant=tenant).values_list('id', 'ingredient_id')
        for variation_id, ingredient_id in variations:
            graph.add_edge(ComponentRef(INGREDIENT, ingredient_id), ComponentRef(VARIATION, variation_id))

        items = RecipeItem.objects.filter(
            recipe__tenant=tenant
        ).values_list('recipe_id', 'component_type', 'component_id')
        for recipe_id, component_type, component_id in items:
            graph.add_edge(ComponentRef(component_type, component_id), ComponentRef(RECIPE, recipe_id))

        lines = ProductComposition.objects.filter(
            product__tenant=tenant
        ).values_list('product_id', 'component_type', 'component_id')
        for product_id, component_type, component_id in lines:
            graph.add_edge(ComponentRef(component_type, component_id), ComponentRef(PRODUCT, product_id))

        return graph

    @property
    def nodes(self) -> Set[ComponentRef]:
        return set(self._nodes)

    def add_node(self, ref: ComponentRef):
        self._nodes.add(ref)

    def add_edge(self, component: ComponentRef, consumer: ComponentRef):
        self._nodes.add(component)
        self._nodes.add(consumer)
        self._consumers[component].add(consumer)
        self._components[consumer].add(component)

    def components_of(self, ref: ComponentRef) -> Set[ComponentRef]:
        return set(self._components.get(ref, ()))

    def consumers_of(self, ref: ComponentRef) -> Set[ComponentRef]:
        return set(self._consumers.get(ref, ()))

    def downstream_of(self, *refs: ComponentRef) -> Set[ComponentRef]:
        """All transitive consumers of the given nodes (the nodes themselves excluded)."""
        seen: Set[ComponentRef] = set()
        queue = deque(refs)
        while queue:
            current = queue.popleft()
            for consumer in self._consumers.get(current, ()):
                if consumer not in seen:
                    seen.add(consumer)
                    queue.append(consumer)
        return seen - set(refs)

    def upstream_of(self, ref: ComponentRef) -> Set[ComponentRef]:
        seen: Set[ComponentRef] = set()
        queue = deque([ref])
        while queue:
            current = queue.popleft()
            for component in self._components.get(current, ()):
                if component not in seen:
                    seen.add(component)
                    queue.append(component)
        return seen

    def would_create_cycle(self, component: ComponentRef, consumer: ComponentRef) -> bool:
        """True if adding component -> consumer closes a cycle."""
        if component == consumer:
            return True
        return component in self.downstream_of(consumer)

    def find_cycle(self) -> Optional[List[ComponentRef]]:
        """Return one cycle as a closed path of nodes, or None if the graph is acyclic."""
        white, grey, black = 0, 1, 2
        color = {node: white for node in self._nodes}
        parent: Dict[ComponentRef, ComponentRef] = {}

        for start in sorted(self._nodes):
            if color[start] != white:
                continue
            stack = [(start, iter(sorted(self._consumers.get(start, ()))))]
            color[start] = grey
            while stack:
                node, children = stack[-1]
                child = next(children, None)
                if child is None:
                    color[node] = black
                    stack.pop()
                    continue
                if color[child] == grey:
                    cycle = [child]
                    current = node
                    while current != child:
                        cycle.append(current)
                        current = parent[current]
                    cycle.append(child)
                    cycle.reverse()
                    return cycle
                if color[child] == white:
                    parent[child] = node
                    color[child] = grey
                    stack.append((child, iter(sorted(self._consumers.get(child, ())))))
        return None

    def topological_levels(self, scope: Optional[Iterable[ComponentRef]] = None) -> List[List[ComponentRef]]:
        """
        Kahn's algorithm restricted to `scope` (default: every node).

        Returns a list of levels. Every node comes after all of its in-scope
        components; nodes within a level do not depend on each other, so a
        level could be computed in parallel.

        Raises:
            CyclicDependencyError: If the scoped subgraph contains a cycle.
        """
        scope_set = set(self._nodes if scope is None else scope)
        in_degree = {
            node: len(self._components.get(node, set()) & scope_set)
            for node in scope_set
        }

        level = sorted(node for node, degree in in_degree.items() if degree == 0)
        levels = []
        visited = 0
        while level:
            levels.append(level)
            visited += len(level)
            next_level = []
            for node in level:
                for consumer in self._consumers.get(node, ()):
                    if consumer not in scope_set:
                        continue
                    in_degree[consumer] -= 1
                    if in_degree[consumer] == 0:
                        next_level.append(consumer)
            level = sorted(next_level)

        if visited != len(scope_set):
            cycle = self.find_cycle() or sorted(n for n, d in in_degree.items() if d > 0)
            raise CyclicDependencyError(cycle)
        return levels

    def topological_order(self, scope: Optional[Iterable[ComponentRef]] = None) -> List[ComponentRef]:
        return [node for level in self.topological_levels(scope) for node in level]

    def partition_acyclic(self, scope: Optional[Iterable[ComponentRef]] = None):
        """
        Non-raising variant of topological_levels().

        Returns (levels, blocked): the levels of every node that can be
        ordered, and the set of nodes that sit on a cycle or depend on one.
        """
        scope_set = set(self._nodes if scope is None else scope)
        in_degree = {
            node: len(self._components.get(node, set()) & scope_set)
            for node in scope_set
        }

        level = sorted(node for node, degree in in_degree.items() if degree == 0)
        levels = []
        ordered: Set[ComponentRef] = set()
        while level:
            levels.append(level)
            ordered.update(level)
            next_level = []
            for node in level:
                for consumer in self._consumers.get(node, ()):
                    if consumer not in scope_set:
                        continue
                    in_degree[consumer] -= 1
                    if in_degree[consumer] == 0:
                        next_level.append(consumer)
            level = sorted(next_level)

        return levels, scope_set - ordered
