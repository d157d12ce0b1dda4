"""Readers for the local pacman configuration and package databases."""

from __future__ import annotations

import glob
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pyalpm
from pydantic import BaseModel, ValidationError

from .models import LocalPackage
from .provider_index import ProviderIndex

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_PACMAN_CONFIG = Path("/etc/pacman.conf")
DEFAULT_DBPATH = "/var/lib/pacman"
DEFAULT_ROOTDIR = "/"


class PacmanConfig:
    """The parts of pacman.conf needed to locate package databases."""

    def __init__(
        self,
        dbpath: str = DEFAULT_DBPATH,
        rootdir: str = DEFAULT_ROOTDIR,
        repos: Iterable[str] = (),
        ignore_packages: Iterable[str] = (),
    ) -> None:
        """Initialize the configuration."""
        self.dbpath: str = dbpath
        self.rootdir: str = rootdir
        self.repos: list[str] = list(repos)
        self.ignore_packages: frozenset[str] = frozenset(ignore_packages)

    @classmethod
    def from_file(cls, path: Path | str) -> PacmanConfig:
        """Parse a pacman.conf file, following ``Include`` directives."""
        config = cls()
        config._parse_file(Path(path), section="")
        return config

    def _parse_file(self, path: Path, section: str) -> str:
        logger.debug("Parsing pacman config %s", path)
        with path.open() as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if len(line) > 2 and line[0] == "[" and line[-1] == "]":  # noqa: PLR2004
                    section = line[1:-1]
                    if section != "options" and section not in self.repos:
                        self.repos.append(section)
                    continue
                key, sep, value = line.partition("=")
                if not sep:
                    # none of the valueless directives matter here
                    continue
                key = key.strip()
                value = value.strip()
                if section == "options":
                    if key == "DBPath":
                        self.dbpath = value
                    elif key == "RootDir":
                        self.rootdir = value
                    elif key == "IgnorePkg":
                        self.ignore_packages = self.ignore_packages | frozenset(value.split())
                if key == "Include":
                    for included in sorted(glob.glob(value)) or [value]:
                        section = self._parse_file(Path(included), section)
        return section


def _local_package(pkg: pyalpm.Package, repo: str | None = None) -> LocalPackage:
    return LocalPackage(pkg.name, pkg.version, pkg.provides, repo)


class SnapshotPackage(BaseModel):
    """A package entry of a local database snapshot."""

    name: str
    version: str
    provides: list[str] = []


class SnapshotRepository(BaseModel):
    """A sync repository entry of a local database snapshot."""

    name: str
    packages: list[SnapshotPackage] = []


class Snapshot(BaseModel):
    """A JSON snapshot of the installed packages and sync repositories."""

    installed: list[SnapshotPackage] = []
    repos: list[SnapshotRepository] = []
    ignore: list[str] = []


class LocalDatabase:
    """A read-only snapshot of the installed packages and the sync repositories."""

    def __init__(
        self,
        installed: Iterable[LocalPackage] = (),
        available: Iterable[LocalPackage] = (),
        ignore_packages: Iterable[str] = (),
    ) -> None:
        """Initialize the database."""
        self.installed: list[LocalPackage] = list(installed)
        self.available: list[LocalPackage] = list(available)
        self.ignore_packages: frozenset[str] = frozenset(ignore_packages)

    @classmethod
    def from_pacman(cls, config: PacmanConfig) -> LocalDatabase:
        """Load the databases a pacman configuration points at through libalpm.

        Raises:
            OSError: if libalpm cannot open the databases.

        """
        available: list[LocalPackage] = []
        try:
            handle = pyalpm.Handle(config.rootdir, config.dbpath)
            installed = [_local_package(pkg) for pkg in handle.get_localdb().pkgcache]
            for repo in config.repos:
                path = Path(config.dbpath) / "sync" / f"{repo}.db"
                if not path.exists():
                    logger.warning("Sync database for %s not found at %s", repo, path)
                    continue
                db = handle.register_syncdb(repo, pyalpm.SIG_DATABASE_OPTIONAL)
                available.extend(_local_package(pkg, repo) for pkg in db.pkgcache)
        except pyalpm.error as e:
            msg = f"Could not read the package databases under {config.dbpath}: {e}"
            raise OSError(msg) from e
        logger.info("Loaded %d installed and %d repository packages", len(installed), len(available))
        return cls(installed, available, config.ignore_packages)

    @classmethod
    def from_json(cls, path: Path | str) -> LocalDatabase:
        """Load a database snapshot from a JSON file.

        Raises:
            ValueError: if the file is not a valid snapshot.

        """
        try:
            snapshot = Snapshot.model_validate_json(Path(path).read_text())
        except ValidationError as e:
            msg = f"Invalid local database snapshot {path}: {e}"
            raise ValueError(msg) from e
        installed = [LocalPackage(p.name, p.version, p.provides) for p in snapshot.installed]
        available = [
            LocalPackage(p.name, p.version, p.provides, repo.name) for repo in snapshot.repos for p in repo.packages
        ]
        return cls(installed, available, snapshot.ignore)

    def to_index(self) -> ProviderIndex:
        """Build the provider index over this snapshot."""
        return ProviderIndex(self.installed, self.available)

    def foreign(self) -> list[LocalPackage]:
        """Get the installed packages that no sync repository carries."""
        in_repos = {package.name for package in self.available}
        return [package for package in self.installed if package.name not in in_repos]

    def should_ignore(self, name: str) -> bool:
        """Check whether a package is ignored."""
        return name in self.ignore_packages
