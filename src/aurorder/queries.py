"""Read-only AUR queries: package details, searches and update checks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .aur import SearchBy
from .models import DependencyKind
from .versions import vercmp

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from .aur import MetadataSource
    from .models import LocalPackage, PackageRecord
    from .pacman import LocalDatabase

logger = logging.getLogger(__name__)

_REGEX_CHARS = "^.+*?$[](){}|\\"
_FIELD_WIDTH = 14
_CONTINUATION = " " * (_FIELD_WIDTH + 3)


class InvalidSearchError(ValueError):
    """A search pattern cannot be compiled or is too vague to send to the AUR."""


def search_fragment(pattern: str) -> str:
    """Get the longest literal run of a regular expression that the AUR can search for.

    Text inside ``[]`` or ``{}`` and characters made optional by ``?`` or ``*`` never
    count. Runs shorter than two characters are useless to the AUR, so an empty
    string means the pattern cannot be searched for at all.
    """
    candidates: list[str] = []
    i = 0
    while i < len(pattern):
        span = 0
        while i + span < len(pattern) and pattern[i + span] not in _REGEX_CHARS:
            span += 1
        if i + span < len(pattern) and pattern[i + span] in "?*":
            span -= 1
        if pattern[i] in "[{":
            close = next((j for j in range(i + span, len(pattern)) if pattern[j] in "]}"), None)
            if close is None:
                return ""
            i = close + 1
            continue
        if span >= 2:  # noqa: PLR2004
            candidates.append(pattern[i : i + span])
            i += span
            continue
        i += 1
    return max(candidates, key=len, default="")


def _matches(record: PackageRecord, patterns: Iterable[re.Pattern[str]], by: SearchBy) -> bool:
    # the AUR matches the other fields exactly, so only names and descriptions are filtered
    if by is SearchBy.name:
        return all(p.search(record.name) for p in patterns)
    if by is SearchBy.name_desc:
        return all(p.search(record.name) or p.search(record.description) for p in patterns)
    return True


def search(
    source: MetadataSource, terms: Sequence[str], by: SearchBy = SearchBy.name_desc, literal: bool = False
) -> list[PackageRecord]:
    """Search the AUR for packages matching every term.

    Each term is a case-insensitive regular expression unless ``literal`` is set. The
    AUR is queried once per term, and results are sorted by name without duplicates.

    Raises:
        InvalidSearchError: if a term is not a valid pattern or has no searchable fragment.
        TransportError: if a request fails.

    """
    patterns = []
    fragments = []
    for term in terms:
        try:
            patterns.append(re.compile(re.escape(term) if literal else term, re.IGNORECASE))
        except re.error as e:
            msg = f"invalid regex: {term}: {e}"
            raise InvalidSearchError(msg) from e
        fragment = term if literal else search_fragment(term)
        if not fragment:
            msg = f"search string '{term}' insufficient for searching by regular expression."
            raise InvalidSearchError(msg)
        fragments.append(fragment)

    found: dict[str, PackageRecord] = {}
    for fragment in fragments:
        logger.debug("Searching the AUR by %s for %r", by.value, fragment)
        for record in source.search(fragment, by):
            if _matches(record, patterns, by):
                found.setdefault(record.name, record)
    return [found[name] for name in sorted(found)]


def info(source: MetadataSource, names: Sequence[str]) -> list[PackageRecord]:
    """Fetch the records of the named packages, sorted by name."""
    found = {record.name: record for record in source.info(names)}
    return [found[name] for name in sorted(found)]


@dataclass(frozen=True)
class Update:
    """An installed foreign package with a newer version on the AUR."""

    name: str
    installed: str
    available: str
    ignored: bool = False

    def __str__(self) -> str:
        line = f"{self.name} {self.installed} -> {self.available}"
        if self.ignored:
            line += " [ignored]"
        return line


def outdated(source: MetadataSource, database: LocalDatabase, names: Sequence[str] = ()) -> list[Update]:
    """Compare foreign packages against the AUR.

    Args:
        source: Where to look the packages up
        database: The local package snapshot
        names: Restrict the check to these packages; all foreign packages when empty

    Returns:
        The packages whose AUR version is newer than the installed one, sorted by name.

    """
    foreign = {package.name: package for package in database.foreign()}
    if names:
        foreign = {name: package for name, package in foreign.items() if name in names}
    if not foreign:
        return []
    updates = []
    for record in source.info(list(foreign)):
        local = foreign.get(record.name)
        if local is None:
            continue
        if vercmp(record.version, local.version) > 0:
            updates.append(Update(record.name, local.version, record.version, database.should_ignore(record.name)))
    return sorted(updates, key=lambda update: update.name)


def format_short(record: PackageRecord, installed: LocalPackage | None = None) -> str:
    """Format a record as a search result."""
    line = f"aur/{record.name} {record.version}"
    if installed is not None:
        line += f" [installed: {installed.version}]"
    return f"{line}\n    {record.description}\n"


def _field(name: str, value: str) -> str:
    return f"{name:<{_FIELD_WIDTH}} : {value}\n"


def _fields(record: PackageRecord, baseurl: str, installed: LocalPackage | None) -> Iterator[tuple[str, str]]:
    version = record.version
    if installed is not None:
        version += f" [installed: {installed.version}]"
    yield "Repository", "aur"
    yield "Name", record.name
    yield "Version", version
    if record.pkgbase != record.name:
        yield "PackageBase", record.pkgbase
    yield "AUR Page", f"{baseurl.rstrip('/')}/packages/{record.name}"
    for label, kind in (
        ("Depends On", DependencyKind.DEPENDS),
        ("Makedepends", DependencyKind.MAKEDEPENDS),
        ("Checkdepends", DependencyKind.CHECKDEPENDS),
    ):
        yield label, "  ".join(str(d) for d in record.declared(kind))
    yield "Provides", "  ".join(str(p) for p in record.provides)
    yield "Optional Deps", f"\n{_CONTINUATION}".join(record.optdepends)
    yield "Description", record.description


def format_long(record: PackageRecord, baseurl: str, installed: LocalPackage | None = None) -> str:
    """Format every known field of a record, one per line, skipping empty lists."""
    lines = [_field(name, value) for name, value in _fields(record, baseurl, installed) if value]
    return "".join(lines) + "\n"
