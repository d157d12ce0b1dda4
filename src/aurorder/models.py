"""Core data models for dependency resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

from .versions import ANY_VERSION, AlpmSpec, InvalidConstraintError, parse_depstring

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)


class DependencyKind(str, Enum):
    """The kinds of dependency a package may declare."""

    DEPENDS = "depends"
    MAKEDEPENDS = "makedepends"
    CHECKDEPENDS = "checkdepends"
    OPTDEPENDS = "optdepends"


# Kinds that take part in build ordering, in the order a package declares them.
BUILD_KINDS: tuple[DependencyKind, ...] = (
    DependencyKind.DEPENDS,
    DependencyKind.MAKEDEPENDS,
    DependencyKind.CHECKDEPENDS,
)


def parse_dependency_kinds(
    value: str, kinds: Iterable[DependencyKind] = BUILD_KINDS
) -> frozenset[DependencyKind]:
    """Apply a comma separated dependency-kind filter to a set of kinds.

    A plain list such as ``depends,makedepends`` replaces ``kinds``, a leading ``+``
    adds to it and a leading ``^`` or ``!`` removes from it. An empty value leaves
    ``kinds`` unchanged.

    Raises:
        ValueError: if the value names an unknown or non-build dependency kind.

    """
    current = frozenset(kinds)
    if not value:
        return current
    mode = value[0]
    if mode in "+^!":
        value = value[1:]
    parsed = set()
    for word in value.split(","):
        if not word:
            continue
        try:
            kind = DependencyKind(word)
        except ValueError:
            kind = None
        if kind not in BUILD_KINDS:
            msg = f"invalid dependency kind: {word}"
            raise ValueError(msg)
        parsed.add(kind)
    if mode == "+":
        return current | parsed
    if mode in "^!":
        return current - parsed
    return frozenset(parsed)


class Provide:
    """A name (optionally at a fixed version) that a package also answers to."""

    def __init__(self, name: str, spec: AlpmSpec = ANY_VERSION) -> None:
        """Initialize a provide."""
        self.name: str = name
        self.spec: AlpmSpec = spec

    @classmethod
    def from_string(cls, depstring: str) -> Provide:
        """Create a provide from a string such as ``libfoo.so=1-64``."""
        name, spec = parse_depstring(depstring)
        return cls(name, spec)

    @property
    def version(self) -> str | None:
        """The provided version, if the provide pins one with ``=``."""
        if self.spec.operator != "=":
            return None
        return str(self.spec.version)

    def satisfies(self, dependency: Dependency) -> bool:
        """Check whether this provide satisfies a dependency.

        An unversioned provide satisfies every constraint on its name. A versioned
        provide only counts when it pins its version with ``=``.
        """
        if self.name != dependency.name:
            return False
        if not self.spec.is_versioned:
            return True
        version = self.version
        return version is not None and dependency.spec.match(version)

    def __eq__(self, other: object) -> bool:
        """Check equality with another provide."""
        return isinstance(other, Provide) and self.name == other.name and str(self.spec) == str(other.spec)

    def __hash__(self) -> int:
        """Compute hash for provide."""
        return hash((self.name, str(self.spec)))

    def __str__(self) -> str:
        """Return the depstring form of the provide."""
        return f"{self.name}{self.spec}"

    def __repr__(self) -> str:
        """Return the representation of the provide."""
        return f"{self.__class__.__name__}({str(self)!r})"


class Dependency:
    """A requirement on a package name, optionally constrained to a version range."""

    def __init__(
        self,
        name: str,
        spec: AlpmSpec = ANY_VERSION,
        kind: DependencyKind = DependencyKind.DEPENDS,
        depstring: str | None = None,
    ) -> None:
        """Initialize a dependency.

        Args:
            name: Name of the required package
            spec: Version constraint
            kind: Which dependency list the requirement was declared in
            depstring: The dependency as originally written

        """
        self.name: str = name
        self.spec: AlpmSpec = spec
        self.kind: DependencyKind = kind
        self.depstring: str = depstring if depstring is not None else f"{name}{spec}"

    @classmethod
    def from_string(cls, depstring: str, kind: DependencyKind = DependencyKind.DEPENDS) -> Dependency:
        """Create a dependency from a depstring such as ``foo>=1.0``.

        Optional dependencies may carry a ``: description`` suffix, which is dropped.

        Raises:
            InvalidConstraintError: if the depstring is malformed.

        """
        if kind is DependencyKind.OPTDEPENDS:
            depstring = depstring.split(":", 1)[0]
        depstring = depstring.strip()
        name, spec = parse_depstring(depstring)
        return cls(name, spec, kind, depstring)

    @property
    def is_versioned(self) -> bool:
        """Whether the dependency constrains the version."""
        return self.spec.is_versioned

    def satisfied_by_version(self, version: str) -> bool:
        """Check a concrete version against the constraint."""
        return self.spec.match(version)

    def satisfied_by(self, candidate: PackageRecord | LocalPackage) -> bool:
        """Check if a package satisfies this dependency by its own identity or a provide."""
        if candidate.name == self.name and self.satisfied_by_version(candidate.version):
            return True
        return any(provide.satisfies(self) for provide in candidate.provides)

    def __eq__(self, other: object) -> bool:
        """Check equality with another dependency."""
        return (
            isinstance(other, Dependency)
            and self.name == other.name
            and str(self.spec) == str(other.spec)
            and self.kind == other.kind
        )

    def __hash__(self) -> int:
        """Compute hash for dependency."""
        return hash((self.name, str(self.spec), self.kind))

    def __str__(self) -> str:
        return self.depstring

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.depstring!r}, kind={self.kind.value})"


def _parse_dependencies(package: str, kind: DependencyKind, depstrings: Iterable[str]) -> tuple[Dependency, ...]:
    dependencies = []
    for depstring in depstrings:
        try:
            dependencies.append(Dependency.from_string(depstring, kind))
        except InvalidConstraintError as e:
            logger.warning("%s: ignoring malformed %s entry: %s", package, kind.value, e)
    return tuple(dependencies)


def _parse_provides(package: str, depstrings: Iterable[str]) -> tuple[Provide, ...]:
    provides = []
    for depstring in depstrings:
        try:
            provides.append(Provide.from_string(depstring))
        except InvalidConstraintError as e:
            logger.warning("%s: ignoring malformed provides entry: %s", package, e)
    return tuple(provides)


class PackageRecord:
    """Metadata for a package whose build recipe lives on the AUR."""

    def __init__(  # noqa: PLR0913
        self,
        name: str,
        version: str,
        pkgbase: str | None = None,
        description: str = "",
        urlpath: str = "",
        depends: Iterable[str] = (),
        makedepends: Iterable[str] = (),
        checkdepends: Iterable[str] = (),
        optdepends: Iterable[str] = (),
        provides: Iterable[str] = (),
    ) -> None:
        """Initialize a package record.

        Build dependencies and provides are given as depstrings and parsed eagerly. An
        entry that does not parse is logged and left out, so one broken upload cannot
        stop a whole resolution. Optional dependencies never take part in resolution
        and are kept exactly as written.
        """
        self._name = name
        self._version = version
        self._pkgbase = pkgbase or name
        self._description = description
        self._urlpath = urlpath
        self._dependencies: dict[DependencyKind, tuple[Dependency, ...]] = {
            DependencyKind.DEPENDS: _parse_dependencies(name, DependencyKind.DEPENDS, depends),
            DependencyKind.MAKEDEPENDS: _parse_dependencies(name, DependencyKind.MAKEDEPENDS, makedepends),
            DependencyKind.CHECKDEPENDS: _parse_dependencies(name, DependencyKind.CHECKDEPENDS, checkdepends),
        }
        self._optdepends = tuple(optdepends)
        self._provides = _parse_provides(name, provides)

    @property
    def name(self) -> str:
        """The package name."""
        return self._name

    @property
    def version(self) -> str:
        """The full ``[epoch:]pkgver-pkgrel`` version."""
        return self._version

    @property
    def pkgbase(self) -> str:
        """The package base, which names the recipe; equal to the name for non-split packages."""
        return self._pkgbase

    @property
    def description(self) -> str:
        """One line description of the package."""
        return self._description

    @property
    def urlpath(self) -> str:
        """Path of the recipe snapshot tarball on the AUR."""
        return self._urlpath

    @property
    def provides(self) -> tuple[Provide, ...]:
        """Names the package also answers to."""
        return self._provides

    @property
    def optdepends(self) -> tuple[str, ...]:
        """Optional dependencies as written, descriptions included."""
        return self._optdepends

    def declared(self, kind: DependencyKind) -> tuple[Dependency, ...]:
        """Get the build dependencies declared under one kind."""
        return self._dependencies[kind]

    def dependencies(self, kinds: Iterable[DependencyKind] = BUILD_KINDS) -> Iterator[Dependency]:
        """Yield the build dependencies of the selected kinds in declaration order.

        Optional dependencies are never yielded.
        """
        selected = frozenset(kinds)
        for kind in BUILD_KINDS:
            if kind in selected:
                yield from self._dependencies[kind]

    def provides_name(self, name: str) -> bool:
        """Check whether the package is named ``name`` or provides it."""
        return self._name == name or any(p.name == name for p in self._provides)

    def __eq__(self, other: object) -> bool:
        """Check equality with another record."""
        return isinstance(other, PackageRecord) and self.name == other.name and self.version == other.version

    def __hash__(self) -> int:
        """Compute hash for record."""
        return hash((self.name, self.version))

    def __str__(self) -> str:
        return f"{self.name} {self.version}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, {self.version!r})"


class LocalPackage:
    """A package from the local system: installed, or available in a sync repository."""

    def __init__(self, name: str, version: str, provides: Iterable[str] = (), repo: str | None = None) -> None:
        """Initialize a local package.

        Args:
            name: Package name
            version: Package version
            provides: Depstrings the package provides
            repo: The sync repository carrying the package, if any

        """
        self.name: str = name
        self.version: str = version
        self.provides: tuple[Provide, ...] = tuple(Provide.from_string(p) for p in provides)
        self.repo: str | None = repo

    def __eq__(self, other: object) -> bool:
        """Check equality with another local package."""
        return (
            isinstance(other, LocalPackage)
            and self.name == other.name
            and self.version == other.version
            and self.repo == other.repo
        )

    def __hash__(self) -> int:
        """Compute hash for local package."""
        return hash((self.name, self.version, self.repo))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, {self.version!r}, repo={self.repo!r})"


@dataclass(frozen=True)
class InstalledRepo:
    """The dependency is already met by an installed package."""


@dataclass(frozen=True)
class AvailableRepo:
    """The dependency can be installed from a sync repository."""

    repo: str | None = None


@dataclass(frozen=True)
class RemoteRecipe:
    """The dependency must be built from an AUR recipe."""

    record: PackageRecord


@dataclass(frozen=True)
class Unknown:
    """Nothing anywhere satisfies the dependency."""


Resolution = Union[InstalledRepo, AvailableRepo, RemoteRecipe, Unknown]


@dataclass(frozen=True)
class GraphNode:
    """A classified package in the dependency graph.

    Only remote recipe nodes have children; every other node is a leaf.
    """

    name: str
    resolution: Resolution
    children: tuple[Dependency, ...] = ()

    def __post_init__(self) -> None:
        if self.children and not isinstance(self.resolution, RemoteRecipe):
            msg = f"{self.name} is not a remote recipe and cannot have children"
            raise ValueError(msg)

    @property
    def record(self) -> PackageRecord | None:
        """The remote record for recipe nodes."""
        if isinstance(self.resolution, RemoteRecipe):
            return self.resolution.record
        return None


class VisitState(Enum):
    """Colouring of a node during a depth-first traversal."""

    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"
