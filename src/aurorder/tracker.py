"""Visitation state for depth-first walks over the dependency graph."""

from __future__ import annotations

from .models import VisitState


class VisitTracker:
    """Colours nodes during a depth-first walk and remembers the active path.

    A node that is re-entered while it is still in progress closes a cycle.
    """

    def __init__(self) -> None:
        self._states: dict[str, VisitState] = {}
        self._path: list[str] = []

    def state(self, name: str) -> VisitState:
        """Get the colour of a node, unvisited until it is first entered."""
        return self._states.get(name, VisitState.UNVISITED)

    @property
    def path(self) -> list[str]:
        """Names on the active path, outermost first."""
        return list(self._path)

    def enter(self, name: str) -> None:
        """Mark a node as in progress and push it onto the active path."""
        if self.state(name) is not VisitState.UNVISITED:
            msg = f"{name} was already visited"
            raise ValueError(msg)
        self._states[name] = VisitState.IN_PROGRESS
        self._path.append(name)

    def leave(self, name: str) -> None:
        """Mark the innermost node on the active path as done."""
        if not self._path or self._path[-1] != name:
            msg = f"{name} is not the innermost node on the active path"
            raise ValueError(msg)
        self._path.pop()
        self._states[name] = VisitState.DONE

    def ancestors(self) -> list[str]:
        """Names on the active path, nearest first."""
        return self._path[::-1]

    def cycle(self, name: str) -> list[str]:
        """Return the cycle closed by re-entering ``name``, ending with ``name`` again."""
        if self.state(name) is not VisitState.IN_PROGRESS:
            msg = f"{name} is not on the active path"
            raise ValueError(msg)
        start = self._path.index(name)
        return [*self._path[start:], name]
