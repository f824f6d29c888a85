"""Tests for the generic algorithms: stable deduplication and the directed graph."""

import pytest

from testbridge.application.algorithms.dedupe import deduplicate_stable
from testbridge.application.algorithms.directed_graph import DirectedGraph


class TestDeduplicateStable:
    def test_keeps_first_occurrence(self):
        assert deduplicate_stable(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_empty_input(self):
        assert deduplicate_stable([]) == []

    def test_custom_key(self):
        items = ["Sources", "sources", "Tests", "SOURCES"]

        assert deduplicate_stable(items, key=str.lower) == ["Sources", "Tests"]

    def test_accepts_generators(self):
        assert deduplicate_stable(n % 3 for n in range(7)) == [0, 1, 2]


@pytest.fixture
def diamond():
    """a -> b, a -> c, b -> d, c -> d."""
    graph = DirectedGraph()
    a, b, c, d = (graph.create_node(name) for name in "abcd")
    graph.create_edge(a, b)
    graph.create_edge(a, c)
    graph.create_edge(b, d)
    graph.create_edge(c, d)
    return graph, (a, b, c, d)


class TestDirectedGraphConstruction:
    def test_node_ids_are_sequential(self):
        graph = DirectedGraph()

        assert [graph.create_node(x) for x in ("x", "y", "z")] == [0, 1, 2]
        assert graph.all_node_ids() == [0, 1, 2]
        assert graph.node_data(1) == "y"

    def test_equal_data_makes_distinct_nodes(self):
        graph = DirectedGraph()

        first = graph.create_node("same")
        second = graph.create_node("same")

        assert first != second

    def test_duplicate_edge_returns_existing_id(self):
        graph = DirectedGraph()
        a = graph.create_node("a")
        b = graph.create_node("b")

        edge = graph.create_edge(a, b)

        assert graph.create_edge(a, b) == edge
        assert graph.all_edge_ids() == [edge]
        assert (graph.edge_start(edge), graph.edge_end(edge)) == (a, b)

    def test_edge_to_unknown_node(self):
        graph = DirectedGraph()
        a = graph.create_node("a")

        with pytest.raises(ValueError, match="end node ID 5"):
            graph.create_edge(a, 5)
        with pytest.raises(ValueError, match="start node ID -1"):
            graph.create_edge(-1, a)

    def test_unknown_ids_are_answered_with_empty_values(self):
        graph = DirectedGraph()

        assert graph.node_data(0) is None
        assert graph.edge_start(0) is None
        assert graph.edges_from(3) == []
        assert graph.nodes_to(3) == []


class TestDirectedGraphQueries:
    def test_neighbours(self, diamond):
        graph, (a, b, c, d) = diamond

        assert graph.nodes_from(a) == ["b", "c"]
        assert graph.nodes_to(d) == ["b", "c"]
        assert graph.node_ids_to(a) == []

    def test_edges_are_directed(self, diamond):
        graph, (a, b, _, _) = diamond

        assert graph.has_edge_between(a, b)
        assert not graph.has_edge_between(b, a)

    def test_paths(self, diamond):
        graph, (a, b, c, d) = diamond

        assert graph.has_path_between(a, d)
        assert not graph.has_path_between(d, a)
        assert not graph.has_path_between(b, c)

    def test_start_node_is_not_its_own_path(self, diamond):
        graph, (a, _, _, _) = diamond

        assert not graph.has_path_between(a, a)


class TestDirectedGraphTraversal:
    def test_breadth_first_order_and_paths(self, diamond):
        graph, (a, b, c, d) = diamond
        visits = []

        graph.breadth_first_visit(a, lambda data, node, path: visits.append((data, path)) or True)

        assert visits == [("b", [a]), ("c", [a]), ("d", [a, b])]

    def test_depth_first_order(self, diamond):
        graph, (a, _, _, _) = diamond
        e = graph.create_node("e")
        graph.create_edge(a, e)
        visited = []

        graph.depth_first_visit(a, lambda data, node, path: visited.append(data) or True)

        assert visited == ["b", "d", "c", "e"]

    def test_visitor_can_prune(self, diamond):
        graph, (a, _, _, _) = diamond
        visited = []

        def visit(data, node, path):
            visited.append(data)
            return data != "b"

        graph.breadth_first_visit(a, visit)

        # d is still reached through c.
        assert visited == ["b", "c", "d"]

    def test_cycle_terminates(self):
        graph = DirectedGraph()
        a = graph.create_node("a")
        b = graph.create_node("b")
        graph.create_edge(a, b)
        graph.create_edge(b, a)
        visited = []

        graph.depth_first_visit(a, lambda data, node, path: visited.append(data) or True)

        assert visited == ["b"]

    def test_unknown_start_visits_nothing(self):
        graph = DirectedGraph()
        visited = []

        graph.breadth_first_visit(7, lambda *args: visited.append(args) or True)

        assert visited == []


class TestTopologicalSort:
    def test_dependencies_come_first(self, diamond):
        graph, _ = diamond

        order = graph.topological_sorted()

        assert order[0] == "a"
        assert order[-1] == "d"
        assert set(order) == {"a", "b", "c", "d"}

    def test_cycle_returns_none(self):
        graph = DirectedGraph()
        a = graph.create_node("a")
        b = graph.create_node("b")
        graph.create_edge(a, b)
        graph.create_edge(b, a)

        assert graph.topological_sorted() is None

    def test_empty_graph(self):
        assert DirectedGraph().topological_sorted() == []
