"""Rooted directed graph implementation."""

from __future__ import annotations

from typing import Generic, TypeVar

import networkx as nx

T = TypeVar("T")


class RootedDiGraph(nx.DiGraph, Generic[T]):
    """A directed graph with an ordered list of root nodes."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        """Initialize the rooted directed graph."""
        super().__init__(*args, **kwargs)
        self.roots: list[T] = []

    def add_root(self, node: T, **attr: object) -> None:
        """Add a node to the graph and mark it as a root.

        Roots keep the order in which they were first added; adding one twice is a no-op.
        """
        if node not in self.roots:
            self.roots.append(node)
        self.add_node(node, **attr)

    def is_root(self, node: T) -> bool:
        """Check whether a node is a root."""
        return node in self.roots

    def shortest_path_from_root(self, node: T) -> int:
        """Return the length of the shortest path from any root to node.

        If there are no roots in the graph or there is no path from a root, return -1.
        """
        lengths = []
        for root in self.roots:
            try:
                lengths.append(nx.shortest_path_length(self, root, node))
            except (nx.NetworkXNoPath, nx.NodeNotFound):
                continue
        return min(lengths) if lengths else -1
