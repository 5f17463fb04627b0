"""
Tests for the cost dependency graph.
"""
import pytest

from cogs.exceptions import CyclicDependencyError
from cogs.services.dependency_graph import (
    ComponentRef,
    CostGraph,
    INGREDIENT,
    VARIATION,
    RECIPE,
    PRODUCT,
)

FLOUR = ComponentRef(INGREDIENT, 1)
PEELED = ComponentRef(VARIATION, 1)
DOUGH = ComponentRef(RECIPE, 1)
SAUCE = ComponentRef(RECIPE, 2)
PIZZA = ComponentRef(PRODUCT, 1)
COMBO = ComponentRef(PRODUCT, 2)


@pytest.fixture
def graph():
    """flour -> dough -> pizza -> combo, peeled onion -> sauce -> pizza."""
    graph = CostGraph()
    graph.add_edge(FLOUR, DOUGH)
    graph.add_edge(PEELED, SAUCE)
    graph.add_edge(DOUGH, PIZZA)
    graph.add_edge(SAUCE, PIZZA)
    graph.add_edge(PIZZA, COMBO)
    return graph


class TestCostGraph:
    """Tests for graph traversal and ordering."""

    def test_downstream_of(self, graph):
        assert graph.downstream_of(FLOUR) == {DOUGH, PIZZA, COMBO}
        assert graph.downstream_of(COMBO) == set()

    def test_upstream_of(self, graph):
        assert graph.upstream_of(PIZZA) == {DOUGH, SAUCE, FLOUR, PEELED}

    def test_topological_order_respects_dependencies(self, graph):
        """Every node comes after all of its components."""
        order = graph.topological_order()
        position = {ref: index for index, ref in enumerate(order)}

        for node in graph.nodes:
            for component in graph.components_of(node):
                assert position[component] < position[node]

    def test_levels_group_independent_nodes(self, graph):
        levels = graph.topological_levels()

        assert set(levels[0]) == {FLOUR, PEELED}
        assert set(levels[1]) == {DOUGH, SAUCE}
        assert levels[2] == [PIZZA]
        assert levels[3] == [COMBO]

    def test_scoped_levels(self, graph):
        """Test that out-of-scope components do not hold back a node."""
        levels = graph.topological_levels(scope={SAUCE, PIZZA})

        assert levels == [[SAUCE], [PIZZA]]

    def test_would_create_cycle(self, graph):
        assert graph.would_create_cycle(COMBO, DOUGH) is True
        assert graph.would_create_cycle(DOUGH, DOUGH) is True
        assert graph.would_create_cycle(SAUCE, COMBO) is False

    def test_find_cycle_none_when_acyclic(self, graph):
        assert graph.find_cycle() is None

    def test_cycle_raises_with_path(self, graph):
        graph.add_edge(PIZZA, DOUGH)

        with pytest.raises(CyclicDependencyError) as exc_info:
            graph.topological_levels()

        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {DOUGH, PIZZA}

    def test_partition_acyclic_blocks_cycle_and_dependents(self, graph):
        """Test that nodes on or after a cycle are blocked and the rest still ordered."""
        graph.add_edge(PIZZA, DOUGH)

        levels, blocked = graph.partition_acyclic()

        assert blocked == {DOUGH, PIZZA, COMBO}
        ordered = {ref for level in levels for ref in level}
        assert ordered == {FLOUR, PEELED, SAUCE}


@pytest.mark.django_db
class TestCostGraphForTenant:
    """Tests for building the graph from the database."""

    def test_for_tenant(self, tenant, flour, peeled_onion, make_recipe, make_product):
        dough = make_recipe("Dough", items=[(INGREDIENT, flour.id, "500", "g")], yield_unit="g", yield_quantity="800")
        pizza = make_product("Pizza", lines=[(RECIPE, dough.id, "250", "g"), (VARIATION, peeled_onion.id, "30", "g")])

        graph = CostGraph.for_tenant(tenant)

        assert graph.components_of(ComponentRef(RECIPE, dough.id)) == {ComponentRef(INGREDIENT, flour.id)}
        assert graph.components_of(ComponentRef(PRODUCT, pizza.id)) == {
            ComponentRef(RECIPE, dough.id),
            ComponentRef(VARIATION, peeled_onion.id),
        }
        assert ComponentRef(PRODUCT, pizza.id) in graph.downstream_of(ComponentRef(INGREDIENT, peeled_onion.ingredient_id))
