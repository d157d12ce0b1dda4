"""Turns a resolved dependency graph into an ordered build plan."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .models import AvailableRepo, InstalledRepo, RemoteRecipe, Unknown, VisitState
from .tracker import VisitTracker

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .graph import DependencyGraph
    from .models import GraphNode

logger = logging.getLogger(__name__)


class StepKind(str, Enum):
    """How a package in the build plan is obtained."""

    SATISFIED_REPOS = "SATISFIEDREPOS"
    REPOS = "REPOS"
    AUR = "AUR"
    TARGET_AUR = "TARGETAUR"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class BuildStep:
    """One line of the build plan."""

    kind: StepKind
    name: str
    pkgbase: str | None = None
    ancestors: tuple[str, ...] = ()

    @property
    def needs_build(self) -> bool:
        return self.kind in (StepKind.AUR, StepKind.TARGET_AUR)

    def __str__(self) -> str:
        if self.kind is StepKind.UNKNOWN:
            return " ".join((self.kind.value, self.name, *self.ancestors))
        if self.needs_build:
            return f"{self.kind.value} {self.name} {self.pkgbase}"
        return f"{self.kind.value} {self.name}"


@dataclass
class BuildPlan:
    """Packages in an order where every package comes after everything it requires."""

    steps: list[BuildStep] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    def __iter__(self) -> Iterator[BuildStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def lines(self) -> list[str]:
        """Render the plan, one newline-terminated line per step."""
        return [f"{step}\n" for step in self.steps]

    @property
    def has_unknown(self) -> bool:
        return any(step.kind is StepKind.UNKNOWN for step in self.steps)

    @property
    def exit_status(self) -> int:
        """Non-zero whenever some dependency could not be satisfied."""
        return 1 if self.has_unknown else 0

    def builds(self) -> list[BuildStep]:
        """The steps that need an AUR recipe built, in order."""
        return [step for step in self.steps if step.needs_build]


def format_cycle(cycle: list[str]) -> str:
    """Render a cycle path such as ``[ a -> b -> a ]``."""
    return f"[ {' -> '.join(cycle)} ]"


class BuildOrderEmitter:
    """Walks the graph depth first from each target and emits packages in post-order.

    Each package is emitted once, before anything that requires it. A requirement that
    leads back onto the active path is a cycle: it is reported and the edge is skipped.
    """

    def __init__(self, graph: DependencyGraph) -> None:
        self.graph: DependencyGraph = graph
        self.tracker: VisitTracker = VisitTracker()
        self.plan: BuildPlan = BuildPlan()

    def _step(self, node: GraphNode) -> BuildStep:
        resolution = node.resolution
        if isinstance(resolution, InstalledRepo):
            return BuildStep(StepKind.SATISFIED_REPOS, node.name)
        if isinstance(resolution, AvailableRepo):
            return BuildStep(StepKind.REPOS, node.name)
        if isinstance(resolution, RemoteRecipe):
            kind = StepKind.TARGET_AUR if self.graph.is_root(node.name) else StepKind.AUR
            return BuildStep(kind, node.name, resolution.record.pkgbase)
        if isinstance(resolution, Unknown):
            return BuildStep(StepKind.UNKNOWN, node.name, ancestors=tuple(self.tracker.ancestors()[1:]))
        msg = f"unhandled resolution {resolution!r}"
        raise TypeError(msg)

    def _walk(self, root: str) -> None:
        tracker = self.tracker
        if tracker.state(root) is not VisitState.UNVISITED:
            return
        tracker.enter(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(self.graph.requirements(root)))]
        while stack:
            name, children = stack[-1]
            child = next(children, None)
            if child is None:
                self.plan.steps.append(self._step(self.graph.package(name)))
                tracker.leave(name)
                stack.pop()
                continue
            state = tracker.state(child)
            if state is VisitState.IN_PROGRESS:
                cycle = tracker.cycle(child)
                logger.warning("found dependency cycle: %s", format_cycle(cycle))
                self.plan.cycles.append(cycle)
            elif state is VisitState.UNVISITED:
                tracker.enter(child)
                stack.append((child, iter(self.graph.requirements(child))))

    def emit(self) -> BuildPlan:
        """Compute the build plan, visiting targets in the order they were requested."""
        for target in self.graph.targets:
            self._walk(target)
        return self.plan
