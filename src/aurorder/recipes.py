"""Fetching AUR recipe sources with git."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from shutil import which
from typing import TYPE_CHECKING

from .aur import DEFAULT_BASEURL

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .emitter import BuildPlan

logger = logging.getLogger(__name__)


class RecipeFetchError(RuntimeError):
    """A recipe could not be cloned or updated."""


class RecipeCheckout:
    """A local git checkout of one package base."""

    def __init__(self, pkgbase: str, path: Path, operation: str) -> None:
        """Initialize the checkout.

        Args:
            pkgbase: The package base that was fetched
            path: Where the recipe lives on disk
            operation: ``clone`` for a fresh checkout, ``update`` for a pull

        """
        self.pkgbase: str = pkgbase
        self.path: Path = path
        self.operation: str = operation

    def __str__(self) -> str:
        return f"{self.operation} complete: {self.path}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.pkgbase!r}, {str(self.path)!r}, {self.operation!r})"


def _git() -> str:
    git_path = which("git")
    if git_path is None:
        msg = "git executable not found in PATH"
        raise RecipeFetchError(msg)
    return git_path


def clone_url(pkgbase: str, baseurl: str = DEFAULT_BASEURL) -> str:
    """Get the git URL of a package base."""
    return f"{baseurl.rstrip('/')}/{pkgbase}.git"


def fetch_recipe(pkgbase: str, directory: Path | str = ".", baseurl: str = DEFAULT_BASEURL) -> RecipeCheckout:
    """Clone a package base into ``directory``, or fast-forward it if it was cloned before.

    Raises:
        RecipeFetchError: if git is missing or fails.

    """
    git_path = _git()
    path = Path(directory).absolute() / pkgbase
    if (path / ".git").is_dir():
        operation = "update"
        command = [git_path, "pull", "--ff-only"]
        cwd: Path | None = path
    else:
        operation = "clone"
        command = [git_path, "clone", clone_url(pkgbase, baseurl), str(path)]
        cwd = None
    logger.debug("Running %s", " ".join(command))
    try:
        subprocess.check_call(command, cwd=cwd)  # noqa: S603
    except subprocess.CalledProcessError as e:
        msg = f"failed to {operation} {pkgbase}: git exited with status {e.returncode}"
        raise RecipeFetchError(msg) from e
    return RecipeCheckout(pkgbase, path, operation)


def fetch_recipes(
    plan: BuildPlan, directory: Path | str = ".", baseurl: str = DEFAULT_BASEURL
) -> Iterator[RecipeCheckout]:
    """Fetch the recipes of the packages a plan builds, in order, once per package base."""
    seen: set[str] = set()
    for step in plan.builds():
        if step.pkgbase is None or step.pkgbase in seen:
            continue
        seen.add(step.pkgbase)
        yield fetch_recipe(step.pkgbase, directory, baseurl)
