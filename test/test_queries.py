from unittest import TestCase

import pytest

from aur_fixtures import FakeAur
from aurorder.aur import SearchBy
from aurorder.models import LocalPackage, PackageRecord
from aurorder.pacman import LocalDatabase
from aurorder.queries import InvalidSearchError, Update, format_long, format_short, outdated, search, search_fragment


class TestSearchFragment(TestCase):
    def test_plain_and_anchored(self) -> None:
        assert search_fragment("foobar") == "foobar"
        assert search_fragment("foobar$") == "foobar"
        assert search_fragment("^foobar") == "foobar"

    def test_brackets_never_count(self) -> None:
        assert search_fragment("[invalid]foobar") == "foobar"
        assert search_fragment("foobar[invalid]moobarbaz") == "moobarbaz"
        assert search_fragment("foobar{invalid}") == "foobar"
        assert search_fragment("^[derp]foobar[[inva$lid][{]}moo?bar{b}az") == "foobar"

    def test_optional_characters_are_dropped(self) -> None:
        assert search_fragment("cow?fu") == "co"
        assert search_fragment("co*fun") == "fun"
        assert search_fragment("fooo*") == "foo"
        assert search_fragment("fooo+") == "fooo"

    def test_alternatives(self) -> None:
        assert search_fragment("(foo|bar)") == "foo"
        assert search_fragment("vim.*(foooo|barr)") == "foooo"

    def test_nothing_searchable(self) -> None:
        for pattern in ("[foobar]", "{foobar}", "{foobar", "foo[bar", "f+", "f+o+o+b+a+r"):
            assert search_fragment(pattern) == "", pattern


class TestSearch(TestCase):
    def setUp(self) -> None:
        self.aur = FakeAur(
            [
                PackageRecord("python-fontparts", "0.11.0-1", description="An API for interacting with font parts"),
                PackageRecord("python-fontpens", "0.2.4-1", description="A collection of classes for fonts"),
                PackageRecord("fontforge-git", "20230101-1", description="Outline and bitmap font editor"),
            ]
        )

    def test_every_pattern_must_match(self) -> None:
        found = search(self.aur, ["^python-font", "PARTS"])
        assert [r.name for r in found] == ["python-fontparts"]

    def test_description_matches(self) -> None:
        found = search(self.aur, ["font", "editor"])
        assert [r.name for r in found] == ["fontforge-git"]

    def test_name_only(self) -> None:
        assert search(self.aur, ["font", "editor"], SearchBy.name) == []

    def test_other_fields_are_not_filtered(self) -> None:
        found = search(self.aur, ["font"], SearchBy.maintainer)
        assert [r.name for r in found] == ["fontforge-git", "python-fontparts", "python-fontpens"]

    def test_results_are_unique(self) -> None:
        found = search(self.aur, ["python", "font"])
        assert [r.name for r in found] == ["python-fontparts", "python-fontpens"]
        assert self.aur.search_calls == [("python", SearchBy.name_desc), ("font", SearchBy.name_desc)]

    def test_literal(self) -> None:
        assert search(self.aur, ["python-font.*"], literal=True) == []
        assert self.aur.search_calls == [("python-font.*", SearchBy.name_desc)]

    def test_invalid(self) -> None:
        with pytest.raises(InvalidSearchError, match="invalid regex"):
            search(self.aur, ["font("])
        with pytest.raises(InvalidSearchError, match="insufficient"):
            search(self.aur, ["font", "[abc]"])
        assert self.aur.search_calls == []


class TestOutdated(TestCase):
    def test_outdated(self) -> None:
        database = LocalDatabase(
            installed=[
                LocalPackage("pyalpm", "0.10.5-1"),
                LocalPackage("pyalpm-docs", "1:0.1-1"),
                LocalPackage("glibc", "2.39-1"),
                LocalPackage("not-on-the-aur", "1.0-1"),
            ],
            available=[LocalPackage("glibc", "2.39-1", repo="core")],
        )
        aur = FakeAur()
        assert outdated(aur, database) == [Update("pyalpm", "0.10.5-1", "0.10.6-1")]
        assert aur.info_calls == [["pyalpm", "pyalpm-docs", "not-on-the-aur"]]

    def test_nothing_foreign(self) -> None:
        aur = FakeAur()
        assert outdated(aur, LocalDatabase()) == []
        assert aur.info_calls == []

    def test_update_line(self) -> None:
        assert str(Update("pyalpm", "0.10.5-1", "0.10.6-1")) == "pyalpm 0.10.5-1 -> 0.10.6-1"
        assert str(Update("linux-git", "6.8-1", "6.9-1", ignored=True)) == "linux-git 6.8-1 -> 6.9-1 [ignored]"


class TestFormat(TestCase):
    def test_short(self) -> None:
        record = PackageRecord("auracle-git", "r400.g1234567-1", description="A flexible client for the AUR")
        assert format_short(record) == "aur/auracle-git r400.g1234567-1\n    A flexible client for the AUR\n"
        assert format_short(record, LocalPackage("auracle-git", "r380.g7654321-1")).startswith(
            "aur/auracle-git r400.g1234567-1 [installed: r380.g7654321-1]\n"
        )

    def test_long_lists_optdepends_one_per_line(self) -> None:
        record = PackageRecord(
            "auracle-git",
            "r400.g1234567-1",
            depends=["pacman", "libcurl.so"],
            optdepends=["awk: for pkgbuild-diff", "git"],
            description="A flexible client for the AUR",
        )
        lines = format_long(record, "https://aur.example.org/").splitlines()
        assert lines == [
            "Repository     : aur",
            "Name           : auracle-git",
            "Version        : r400.g1234567-1",
            "AUR Page       : https://aur.example.org/packages/auracle-git",
            "Depends On     : pacman  libcurl.so",
            "Optional Deps  : awk: for pkgbuild-diff",
            "                 git",
            "Description    : A flexible client for the AUR",
            "",
        ]
