"""Dependency graph implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .graphs import RootedDiGraph

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .models import Dependency, GraphNode


class DependencyGraph(RootedDiGraph[str]):
    """Classified packages keyed by name, with an edge from each package to what it requires.

    Dependencies are recorded by the name they were requested under. Several requested
    names may map to one node, for instance when a package provides another name.
    """

    def __init__(self, *args: object, **kwargs: object) -> None:
        """Initialize an empty dependency graph."""
        super().__init__(*args, **kwargs)
        self._resolved: dict[str, str] = {}

    def add_package(self, node: GraphNode) -> None:
        """Add a classified package, mapping its own name to it."""
        if node.name in self:
            msg = f"{node.name} is already in the graph"
            raise ValueError(msg)
        self.add_node(node.name, node=node)
        self._resolved.setdefault(node.name, node.name)

    def add_alias(self, requested: str, name: str) -> None:
        """Record that dependencies on ``requested`` are satisfied by node ``name``."""
        if name not in self:
            msg = f"{name} is not in the graph"
            raise KeyError(msg)
        self._resolved.setdefault(requested, name)

    def resolved_name(self, requested: str) -> str | None:
        """Get the node that satisfies dependencies on ``requested``, if it was classified."""
        return self._resolved.get(requested)

    def add_dependency(self, parent: str, child: str, dependency: Dependency) -> None:
        """Record that ``parent`` requires ``child`` through ``dependency``."""
        if self.has_edge(parent, child):
            return
        self.add_edge(parent, child, dependency=dependency)

    def package(self, name: str) -> GraphNode:
        """Get the classified package with this name."""
        return self.nodes[name]["node"]

    def packages(self) -> Iterator[GraphNode]:
        """Iterate over all classified packages in discovery order."""
        for name in self:
            yield self.package(name)

    def requirements(self, name: str) -> list[str]:
        """Get the names a package requires, in declaration order."""
        return list(self.successors(name))

    @property
    def targets(self) -> list[str]:
        """Names of the requested packages, in request order."""
        return self.roots

    def depth(self) -> int:
        """Return the length of the longest shortest path from a target to any package."""
        depths = [self.shortest_path_from_root(name) for name in self]
        return max(depths, default=0)
