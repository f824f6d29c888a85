"""
Arena-based directed graph.

Nodes and edges live in flat lists and are addressed by small integer
handles, so deduplication never depends on object identity.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

NodeId = int
EdgeId = int

# Visitor signature: (data, node id, ids on the path leading to the node).
# Returning False stops the traversal from expanding that node.
Visitor = Callable[[T, NodeId, list[NodeId]], bool]


@dataclass(frozen=True)
class _Edge:
    start: NodeId
    end: NodeId


class DirectedGraph(Generic[T]):
    """A directed graph with at most one edge per ordered pair of nodes."""

    def __init__(self) -> None:
        self._nodes: list[T] = []
        self._edges: list[_Edge] = []
        self._outgoing: list[list[EdgeId]] = []
        self._incoming: list[list[EdgeId]] = []

    # Construction

    def create_node(self, data: T) -> NodeId:
        self._nodes.append(data)
        self._outgoing.append([])
        self._incoming.append([])
        return len(self._nodes) - 1

    def create_edge(self, start: NodeId, end: NodeId) -> EdgeId:
        """Connect ``start`` to ``end``, returning the existing edge if any."""
        if not self.has_node_id(start):
            raise ValueError(f"Cannot connect start node ID {start} that does not exist")
        if not self.has_node_id(end):
            raise ValueError(f"Cannot connect end node ID {end} that does not exist")

        existing = self.edge_between(start, end)
        if existing is not None:
            return existing

        self._edges.append(_Edge(start, end))
        edge_id = len(self._edges) - 1
        self._outgoing[start].append(edge_id)
        self._incoming[end].append(edge_id)
        return edge_id

    # Queries

    def all_node_ids(self) -> list[NodeId]:
        return list(range(len(self._nodes)))

    def all_edge_ids(self) -> list[EdgeId]:
        return list(range(len(self._edges)))

    def has_node_id(self, node_id: NodeId) -> bool:
        return 0 <= node_id < len(self._nodes)

    def has_edge_id(self, edge_id: EdgeId) -> bool:
        return 0 <= edge_id < len(self._edges)

    def node_data(self, node_id: NodeId) -> T | None:
        if not self.has_node_id(node_id):
            return None
        return self._nodes[node_id]

    def edge_start(self, edge_id: EdgeId) -> NodeId | None:
        if not self.has_edge_id(edge_id):
            return None
        return self._edges[edge_id].start

    def edge_end(self, edge_id: EdgeId) -> NodeId | None:
        if not self.has_edge_id(edge_id):
            return None
        return self._edges[edge_id].end

    def edges_from(self, start: NodeId) -> list[EdgeId]:
        if not self.has_node_id(start):
            return []
        return list(self._outgoing[start])

    def edges_to(self, end: NodeId) -> list[EdgeId]:
        if not self.has_node_id(end):
            return []
        return list(self._incoming[end])

    def node_ids_from(self, start: NodeId) -> list[NodeId]:
        return [self._edges[e].end for e in self.edges_from(start)]

    def node_ids_to(self, end: NodeId) -> list[NodeId]:
        return [self._edges[e].start for e in self.edges_to(end)]

    def nodes_from(self, start: NodeId) -> list[T]:
        return [self._nodes[n] for n in self.node_ids_from(start)]

    def nodes_to(self, end: NodeId) -> list[T]:
        return [self._nodes[n] for n in self.node_ids_to(end)]

    def edge_between(self, start: NodeId, end: NodeId) -> EdgeId | None:
        for edge_id in self.edges_from(start):
            if self._edges[edge_id].end == end:
                return edge_id
        return None

    def has_edge_between(self, start: NodeId, end: NodeId) -> bool:
        return self.edge_between(start, end) is not None

    def has_path_between(self, start: NodeId, end: NodeId) -> bool:
        """Return True if ``end`` is reachable from ``start`` over one or more edges."""
        found = False

        def visit(_data: T, node_id: NodeId, _path: list[NodeId]) -> bool:
            nonlocal found
            if node_id == end:
                found = True
            return not found

        self.breadth_first_visit(start, visit)
        return found

    # Traversal

    def breadth_first_visit(self, start: NodeId, should_visit: Visitor) -> None:
        """
        Visit nodes reachable from ``start`` in breadth-first order.

        The start node itself is not reported to ``should_visit``.
        """
        if not self.has_node_id(start):
            return

        queue: deque[tuple[NodeId, list[NodeId]]] = deque([(start, [])])
        visited: set[NodeId] = set()

        while queue:
            node, path = queue.popleft()
            if node in visited:
                continue
            visited.add(node)

            if node != start and not should_visit(self._nodes[node], node, path):
                continue

            total_path = [*path, node]
            for next_node in self.node_ids_from(node):
                if next_node not in visited:
                    queue.append((next_node, total_path))

    def depth_first_visit(self, start: NodeId, should_visit: Visitor) -> None:
        """
        Visit nodes reachable from ``start`` in depth-first order.

        Siblings are visited in edge creation order. The start node itself is
        not reported to ``should_visit``.
        """
        if not self.has_node_id(start):
            return

        stack: list[tuple[NodeId, list[NodeId]]] = [(start, [])]
        visited: set[NodeId] = set()

        while stack:
            node, path = stack.pop()
            if node in visited:
                continue
            visited.add(node)

            if node != start and not should_visit(self._nodes[node], node, path):
                continue

            total_path = [*path, node]
            for next_node in reversed(self.node_ids_from(node)):
                if next_node not in visited:
                    stack.append((next_node, total_path))

    def topological_sorted(self) -> list[T] | None:
        """
        Return node data in topological order, or None if the graph has a cycle.
        """
        permanent: set[NodeId] = set()
        temporary: set[NodeId] = set()
        result: list[T] = []

        def visit(node: NodeId) -> bool:
            if node in permanent:
                return True
            if node in temporary:
                return False

            temporary.add(node)
            for next_node in self.node_ids_from(node):
                if not visit(next_node):
                    return False
            temporary.discard(node)
            permanent.add(node)
            result.append(self._nodes[node])
            return True

        for node in self.all_node_ids():
            if not visit(node):
                return None

        result.reverse()
        return result
