"""Dependency graph construction and provider queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tqdm import tqdm

from .aur import SearchBy
from .cache import NOT_FOUND, MetadataCache
from .emitter import BuildOrderEmitter
from .graph import DependencyGraph
from .models import BUILD_KINDS, AvailableRepo, GraphNode, InstalledRepo, RemoteRecipe, Unknown
from .provider_index import ProviderIndex, ProviderStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .aur import MetadataSource
    from .emitter import BuildPlan
    from .models import Dependency, DependencyKind, PackageRecord

logger = logging.getLogger(__name__)


class TargetNotFoundError(LookupError):
    """A requested package is neither in a repository nor on the AUR."""

    def __init__(self, names: Sequence[str]) -> None:
        """Initialize with the names that were not found."""
        self.names: list[str] = list(names)
        super().__init__(f"no results found for {', '.join(self.names)}")


class ResolutionContext:
    """Everything one resolution request works against.

    The metadata cache lives exactly as long as the context, so separate requests never
    share fetched records.
    """

    def __init__(
        self,
        client: MetadataSource,
        index: ProviderIndex | None = None,
        kinds: Iterable[DependencyKind] = BUILD_KINDS,
        cache: MetadataCache | None = None,
    ) -> None:
        """Initialize the context.

        Args:
            client: The remote metadata service
            index: Installed and sync-repository packages; empty if not given
            kinds: Dependency kinds to traverse
            cache: Cache to reuse instead of creating a fresh one

        """
        self.client: MetadataSource = client
        self.index: ProviderIndex = index if index is not None else ProviderIndex()
        self.kinds: frozenset[DependencyKind] = frozenset(kinds)
        self.cache: MetadataCache = cache if cache is not None else MetadataCache(client)


class GraphBuilder:
    """Discovers the dependency graph one frontier level at a time.

    Names that cannot be classified locally are collected across the whole level and
    fetched with a single batched lookup before the next level is explored.
    """

    def __init__(self, context: ResolutionContext) -> None:
        self.context: ResolutionContext = context
        self.graph: DependencyGraph = DependencyGraph()
        self.levels: int = 0

    def _classify_locally(self, dependency: Dependency) -> str | None:
        """Classify a dependency without network access, returning the node name it maps to."""
        graph = self.graph
        name = graph.resolved_name(dependency.name)
        if name is not None:
            return name

        status = self.context.index.resolve(dependency)
        if status is ProviderStatus.SATISFIED:
            graph.add_package(GraphNode(dependency.name, InstalledRepo()))
            return dependency.name
        if status is ProviderStatus.AVAILABLE:
            graph.add_package(GraphNode(dependency.name, AvailableRepo(self.context.index.repo_for(dependency))))
            return dependency.name

        record = self.context.cache.find_provider(dependency)
        if record is not None and record.name in graph:
            graph.add_alias(dependency.name, record.name)
            return record.name

        if self.context.cache.get(dependency.name) is NOT_FOUND:
            graph.add_package(GraphNode(dependency.name, Unknown()))
            return dependency.name
        return None

    def _add_remote(self, record: PackageRecord) -> GraphNode:
        node = GraphNode(record.name, RemoteRecipe(record), tuple(record.dependencies(self.context.kinds)))
        self.graph.add_package(node)
        return node

    def build(self, targets: Sequence[Dependency]) -> DependencyGraph:
        """Build the graph for the requested targets.

        Raises:
            TargetNotFoundError: if a target has no provider anywhere.
            TransportError: if the metadata service fails.

        """
        # a target requested twice still yields a single node
        unique_targets: list[Dependency] = []
        for target in targets:
            if all(target.name != seen.name for seen in unique_targets):
                unique_targets.append(target)
        frontier: list[tuple[str | None, Dependency]] = [(None, target) for target in unique_targets]

        with tqdm(desc="resolving dependencies", leave=False, unit=" packages", disable=None) as t:
            while frontier:
                pending: dict[str, Dependency] = {}
                for _, dependency in frontier:
                    if dependency.name not in pending and self._classify_locally(dependency) is None:
                        pending[dependency.name] = dependency

                next_frontier: list[tuple[str | None, Dependency]] = []
                if pending:
                    self.levels += 1
                    results = self.context.cache.fetch_batch(pending)
                    for result in results.values():
                        if result is not NOT_FOUND:
                            node = self._add_remote(result)
                            next_frontier.extend((node.name, child) for child in node.children)
                    # a name missing on the AUR may still be provided by a record fetched in
                    # this batch; otherwise it becomes unknown
                    for name, result in results.items():
                        if result is NOT_FOUND:
                            self._classify_locally(pending[name])

                for parent, dependency in frontier:
                    name = self.graph.resolved_name(dependency.name)
                    if name is None:
                        msg = f"{dependency.name} was not classified"
                        raise RuntimeError(msg)
                    if parent is None:
                        self.graph.add_root(name)
                    elif name != parent:
                        self.graph.add_dependency(parent, name, dependency)

                if all(parent is None for parent, _ in frontier):
                    missing = [
                        name for name in self.graph.targets if isinstance(self.graph.package(name).resolution, Unknown)
                    ]
                    if missing:
                        raise TargetNotFoundError(missing)

                t.total = len(self.graph)
                t.update(len(self.graph) - t.n)
                frontier = next_frontier

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Resolved %d packages in %d remote lookups, depth %d",
                len(self.graph),
                self.levels,
                self.graph.depth(),
            )
        return self.graph


def build_graph(targets: Sequence[Dependency], context: ResolutionContext) -> DependencyGraph:
    """Build the dependency graph for the requested targets."""
    return GraphBuilder(context).build(targets)


def build_order(targets: Sequence[Dependency], context: ResolutionContext) -> BuildPlan:
    """Resolve the targets and compute the order in which to build them.

    Raises:
        TargetNotFoundError: if a target has no provider anywhere.
        TransportError: if the metadata service fails.

    """
    graph = build_graph(targets, context)
    return BuildOrderEmitter(graph).emit()


@dataclass(frozen=True, order=True)
class ProviderMatch:
    """A package that satisfies at least one of the queried specs."""

    source: str
    name: str
    version: str

    @property
    def is_remote(self) -> bool:
        """Whether the provider is an AUR package rather than a local one."""
        return self.source == "aur"

    def __str__(self) -> str:
        return f"{self.source}/{self.name} {self.version}"


def resolve_providers(specs: Sequence[Dependency], context: ResolutionContext) -> list[ProviderMatch]:
    """Find every known package that satisfies any of the given specs.

    Specs on the same name are combined, so the result is the union of the providers of
    each spec. No match at all is a valid, empty result.

    Raises:
        TransportError: if the metadata service fails.

    """
    by_name: dict[str, list[Dependency]] = {}
    for spec in specs:
        by_name.setdefault(spec.name, []).append(spec)

    matches: set[ProviderMatch] = set()
    for name, name_specs in by_name.items():
        hits = context.client.search(name, SearchBy.provides)
        found = context.cache.fetch_batch(hit.name for hit in hits)
        records = [record for record in found.values() if record is not NOT_FOUND]
        for record in records:
            if any(spec.satisfied_by(record) for spec in name_specs):
                matches.add(ProviderMatch("aur", record.name, record.version))
        for package in context.index.providers(name):
            if any(spec.satisfied_by(package) for spec in name_specs):
                matches.add(ProviderMatch(package.repo or "local", package.name, package.version))
    return sorted(matches)
