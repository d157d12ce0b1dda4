import subprocess
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase
from unittest.mock import MagicMock, patch

import pytest

from aurorder.emitter import BuildPlan, BuildStep, StepKind
from aurorder.recipes import RecipeFetchError, clone_url, fetch_recipe, fetch_recipes

GIT = "/usr/bin/git"


@patch("aurorder.recipes.which", return_value=GIT)
@patch("aurorder.recipes.subprocess.check_call")
class TestRecipes(TestCase):
    def setUp(self) -> None:
        tmp = TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name).absolute()

    def test_clone(self, check_call: MagicMock, _which: MagicMock) -> None:
        checkout = fetch_recipe("auracle-git", self.root, "https://aur.example.org/")
        check_call.assert_called_once_with(
            [GIT, "clone", "https://aur.example.org/auracle-git.git", str(self.root / "auracle-git")], cwd=None
        )
        assert checkout.operation == "clone"
        assert str(checkout) == f"clone complete: {self.root / 'auracle-git'}"

    def test_update_existing_checkout(self, check_call: MagicMock, _which: MagicMock) -> None:
        (self.root / "auracle-git" / ".git").mkdir(parents=True)
        checkout = fetch_recipe("auracle-git", self.root)
        check_call.assert_called_once_with([GIT, "pull", "--ff-only"], cwd=self.root / "auracle-git")
        assert str(checkout) == f"update complete: {self.root / 'auracle-git'}"

    def test_git_failure(self, check_call: MagicMock, _which: MagicMock) -> None:
        check_call.side_effect = subprocess.CalledProcessError(128, ["git", "clone"])
        with pytest.raises(RecipeFetchError, match="failed to clone auracle-git: git exited with status 128"):
            fetch_recipe("auracle-git", self.root)

    def test_git_missing(self, check_call: MagicMock, which: MagicMock) -> None:
        which.return_value = None
        with pytest.raises(RecipeFetchError, match="git executable not found"):
            fetch_recipe("auracle-git", self.root)
        check_call.assert_not_called()

    def test_fetch_recipes_once_per_pkgbase(self, check_call: MagicMock, _which: MagicMock) -> None:
        steps = [
            BuildStep(StepKind.SATISFIED_REPOS, "python"),
            BuildStep(StepKind.REPOS, "python-pytest"),
            BuildStep(StepKind.UNKNOWN, "python-nope", ancestors=("pyalpm",)),
            BuildStep(StepKind.AUR, "pyalpm", "pyalpm"),
            BuildStep(StepKind.TARGET_AUR, "pyalpm-docs", "pyalpm"),
            BuildStep(StepKind.TARGET_AUR, "auracle-git", "auracle-git"),
        ]
        checkouts = list(fetch_recipes(BuildPlan(steps), self.root))
        assert [c.pkgbase for c in checkouts] == ["pyalpm", "auracle-git"]
        assert check_call.call_count == 2


class TestCloneUrl(TestCase):
    def test_clone_url(self) -> None:
        assert clone_url("pyalpm") == "https://aur.archlinux.org/pyalpm.git"
        assert clone_url("pyalpm", "https://aur.example.org/") == "https://aur.example.org/pyalpm.git"
