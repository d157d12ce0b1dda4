"""Memoizing, batching cache in front of the remote metadata service."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .aur import MetadataSource
    from .models import Dependency, PackageRecord

logger = logging.getLogger(__name__)


class NotFound(Enum):
    """Marker for names the remote service does not know."""

    NOT_FOUND = "not_found"

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = NotFound.NOT_FOUND

Lookup = Union["PackageRecord", NotFound]


class MetadataCache:
    """Remote package records, memoized by name for the lifetime of one resolution.

    Every :meth:`fetch_batch` issues at most one logical request to the metadata source,
    so the number of round trips is bounded by the number of batches rather than the
    number of names.
    """

    def __init__(self, client: MetadataSource) -> None:
        """Initialize an empty cache over ``client``."""
        self.client: MetadataSource = client
        self._entries: dict[str, Lookup] = {}
        self.remote_calls: int = 0

    def __len__(self) -> int:
        """Return the number of names looked up so far."""
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        """Check whether a name has already been looked up."""
        return name in self._entries

    def __iter__(self) -> Iterator[PackageRecord]:
        """Iterate over the records fetched so far."""
        for entry in self._entries.values():
            if entry is not NOT_FOUND:
                yield entry

    def get(self, name: str) -> Lookup | None:
        """Get the memoized lookup for a name, or None if it was never fetched."""
        return self._entries.get(name)

    def fetch_batch(self, names: Iterable[str]) -> dict[str, Lookup]:
        """Look up many names at once.

        Names that were already looked up are answered from memory; the rest are
        requested together in a single call to the metadata source. Names the source
        does not return are memoized as :data:`NOT_FOUND`.

        Raises:
            TransportError: if the metadata source fails.

        """
        wanted = list(dict.fromkeys(names))
        missing = [name for name in wanted if name not in self._entries]
        if missing:
            self.remote_calls += 1
            logger.debug("Fetching %d packages from the AUR: %s", len(missing), ", ".join(missing))
            for record in self.client.info(missing):
                self._entries[record.name] = record
            for name in missing:
                if name not in self._entries:
                    logger.debug("%s was not found on the AUR", name)
                    self._entries[name] = NOT_FOUND
        return {name: self._entries[name] for name in wanted}

    def find_provider(self, dependency: Dependency) -> PackageRecord | None:
        """Find an already fetched record satisfying a dependency, without any network access.

        A record with the exact name is preferred over one that merely provides it.
        """
        entry = self._entries.get(dependency.name)
        if entry is not None and entry is not NOT_FOUND and dependency.satisfied_by(entry):
            return entry
        for record in self:
            if record.name != dependency.name and dependency.satisfied_by(record):
                return record
        return None
