"""Index of packages that the local package manager can already satisfy."""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .models import Dependency, LocalPackage

logger = logging.getLogger(__name__)


class ProviderStatus(Enum):
    """Where a dependency can be satisfied locally."""

    SATISFIED = "satisfied"
    AVAILABLE = "available"
    NOT_FOUND = "not_found"


class _PackageSet:
    """Packages indexed by name and by the names they provide."""

    def __init__(self, packages: Iterable[LocalPackage]) -> None:
        self.by_name: dict[str, LocalPackage] = {}
        self.by_provide: dict[str, list[LocalPackage]] = defaultdict(list)
        for package in packages:
            # the first repository listed wins, like pacman does
            if package.name in self.by_name:
                continue
            self.by_name[package.name] = package
            for provide in package.provides:
                self.by_provide[provide.name].append(package)

    def __len__(self) -> int:
        return len(self.by_name)

    def find(self, dependency: Dependency) -> LocalPackage | None:
        package = self.by_name.get(dependency.name)
        if package is not None and dependency.satisfied_by(package):
            return package
        for provider in self.by_provide.get(dependency.name, ()):
            if dependency.satisfied_by(provider):
                return provider
        return None

    def named(self, name: str) -> Iterator[LocalPackage]:
        package = self.by_name.get(name)
        if package is not None:
            yield package
        for provider in self.by_provide.get(name, ()):
            if provider is not package:
                yield provider


class ProviderIndex:
    """Answers whether installed or sync-repository packages satisfy a dependency.

    The index is a read-only snapshot taken before resolution starts.
    """

    def __init__(self, installed: Iterable[LocalPackage] = (), available: Iterable[LocalPackage] = ()) -> None:
        """Initialize the index.

        Args:
            installed: Packages installed on the system
            available: Packages offered by the configured sync repositories, in repository order

        """
        self._installed = _PackageSet(installed)
        self._available = _PackageSet(available)
        logger.debug(
            "Provider index holds %d installed and %d available packages", len(self._installed), len(self._available)
        )

    def resolve(self, dependency: Dependency) -> ProviderStatus:
        """Classify a dependency against the local package sets.

        Installed packages are consulted before sync repositories; within each set an
        exact name match is preferred over a provide.
        """
        if self._installed.find(dependency) is not None:
            return ProviderStatus.SATISFIED
        if self._available.find(dependency) is not None:
            return ProviderStatus.AVAILABLE
        return ProviderStatus.NOT_FOUND

    def repo_for(self, dependency: Dependency) -> str | None:
        """Get the sync repository that would satisfy a dependency, if any."""
        package = self._available.find(dependency)
        return package.repo if package is not None else None

    def providers(self, name: str) -> Iterator[LocalPackage]:
        """Yield every installed or repository package named ``name`` or providing it."""
        seen: set[tuple[str, str | None]] = set()
        for package in (*self._installed.named(name), *self._available.named(name)):
            key = (package.name, package.repo)
            if key not in seen:
                seen.add(key)
                yield package
