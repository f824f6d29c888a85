"""Dependency graph between the targets of a manifest."""

from __future__ import annotations

from .algorithms.directed_graph import DirectedGraph, NodeId
from ..domain.models import Manifest, Target


class TargetDependencyGraph(DirectedGraph[str]):
    """
    Directed graph of target names.

    Edges point from a dependency to the target that depends on it. Products
    and targets that are referenced but not declared become nodes too.
    """

    def __init__(self, manifest: Manifest) -> None:
        super().__init__()
        self._name_map: dict[str, NodeId] = {}

        for target in manifest.targets:
            target_id = self._ensure_node(target.name)
            for dependency_name in target.dependency_names:
                dependency_id = self._ensure_node(dependency_name)
                self.create_edge(dependency_id, target_id)

    def _ensure_node(self, name: str) -> NodeId:
        node_id = self._name_map.get(name)
        if node_id is None:
            node_id = self.create_node(name)
            self._name_map[name] = node_id
        return node_id

    def _node_id(self, target: Target | str) -> NodeId | None:
        name = target if isinstance(target, str) else target.name
        return self._name_map.get(name)

    def dependents_of(self, target: Target | str) -> list[str]:
        """Names of targets that depend directly on ``target``."""
        node_id = self._node_id(target)
        if node_id is None:
            return []
        return self.nodes_from(node_id)

    def dependencies_of(self, target: Target | str) -> list[str]:
        """Names of the direct dependencies of ``target``."""
        node_id = self._node_id(target)
        if node_id is None:
            return []
        return self.nodes_to(node_id)

    def has_dependency_path(self, target: Target | str, dependency: Target | str) -> bool:
        """Return True if ``target`` depends on ``dependency``, directly or not."""
        target_id = self._node_id(target)
        dependency_id = self._node_id(dependency)
        if target_id is None or dependency_id is None:
            return False
        return self.has_path_between(dependency_id, target_id)

    def has_direct_dependency(self, target: Target | str, dependency: Target | str) -> bool:
        target_id = self._node_id(target)
        dependency_id = self._node_id(dependency)
        if target_id is None or dependency_id is None:
            return False
        return self.has_edge_between(dependency_id, target_id)
