"""An in-memory AUR and local package database shared by the tests."""

from __future__ import annotations

from collections.abc import Sequence

from aurorder.aur import MetadataSource, SearchBy
from aurorder.models import LocalPackage, PackageRecord
from aurorder.provider_index import ProviderIndex


def _record(name: str, version: str = "1.0-1", **kwargs: object) -> PackageRecord:
    return PackageRecord(name=name, version=version, **kwargs)  # type: ignore[arg-type]


AUR_RECORDS = [
    # ocaml
    _record("ocaml-configurator", "0.16.0-1", depends=["ocaml", "ocaml-stdio"], makedepends=["dune"]),
    _record("ocaml-stdio", "0.16.0-1", depends=["ocaml", "ocaml-base"], makedepends=["dune"]),
    _record("ocaml-base", "0.16.3-1", depends=["ocaml", "ocaml-sexplib0"], makedepends=["dune"]),
    _record("ocaml-sexplib0", "0.16.0-1", depends=["ocaml"], makedepends=["dune"]),
    _record(
        "ocaml-cryptokit",
        "1.19-1",
        depends=["ocaml", "zlib", "gmp", "ocaml-zarith"],
        makedepends=["ocamlbuild"],
    ),
    _record("ocaml-zarith", "1.13-1", depends=["ocaml", "gmp"], makedepends=["ocaml-findlib"]),
    # unknown dependencies
    _record(
        "auracle-git",
        "r400.g1234567-1",
        pkgbase="auracle-git",
        depends=["pacman", "libarchive.so", "libcurl.so", "libsystemd.so"],
        makedepends=["meson", "git", "nlohmann-json", "gtest", "gmock"],
    ),
    _record("nlohmann-json", "3.11.3-1", makedepends=["cmake"]),
    # a dependency cycle
    _record("python-fontpens", "0.2.4-1", depends=["python-fontparts"]),
    _record("python-fontparts", "0.11.0-1", depends=["python-fontpens"]),
    # nothing required at all
    _record("mingw-w64-environment", "1-2"),
    # split package sharing a pkgbase
    _record("pyalpm-docs", "0.10.6-1", pkgbase="pyalpm", depends=["pyalpm"]),
    _record("pyalpm", "0.10.6-1", pkgbase="pyalpm", checkdepends=["python-pytest"]),
    # providers
    _record(
        "curl-git",
        "8.7.1.r201.gc8e0cd1de8-1",
        provides=["curl=8.7.1.r201.gc8e0cd1de8", "libcurl.so"],
    ),
    _record("curl-http3-ngtcp2", "8.7.1-1", provides=["curl=8.7.1"]),
    _record("curl-quiche-git", "8.7.1.r150.g1234567-1", provides=["curl=8.7.1.r150.g1234567"]),
    _record("pacman-git", "6.1.0.r9.g1234567-1", provides=["pacman=6.1.0"]),
    _record("jdk-bin", "22-1", provides=["java-environment"]),
    _record("jdk17-temurin", "17.0.10-1", provides=["java-environment=17"]),
    _record("needs-java", "1.0-1", depends=["java-environment>=21"]),
    _record("needs-libcurl", "1.0-1", depends=["curl-git", "libcurl-consumer"]),
    _record("libcurl-consumer", "1.0-1", depends=["libcurl.so"]),
]

INSTALLED = [
    LocalPackage("ocaml", "4.14.1-2"),
    LocalPackage("glibc", "2.39-1"),
]

AVAILABLE = [
    LocalPackage("dune", "3.14.0-1", repo="extra"),
    LocalPackage("zlib", "1:1.3.1-1", repo="core"),
    LocalPackage("gmp", "6.3.0-1", repo="core"),
    LocalPackage("ocaml-findlib", "1.9.6-6", repo="extra"),
    LocalPackage("ocamlbuild", "0.14.3-1", repo="extra"),
    LocalPackage("curl", "8.7.1-1", provides=["libcurl.so=4-64"], repo="core"),
    LocalPackage("python-pytest", "8.1.1-1", repo="extra"),
]


class FakeAur(MetadataSource):
    """Serves a fixed set of records and remembers every call it receives."""

    def __init__(self, records: Sequence[PackageRecord] = tuple(AUR_RECORDS)) -> None:
        self.records: dict[str, PackageRecord] = {record.name: record for record in records}
        self.info_calls: list[list[str]] = []
        self.search_calls: list[tuple[str, SearchBy]] = []

    def info(self, names: Sequence[str]) -> list[PackageRecord]:
        self.info_calls.append(list(names))
        return [self.records[name] for name in names if name in self.records]

    def search(self, term: str, by: SearchBy = SearchBy.name_desc) -> list[PackageRecord]:
        self.search_calls.append((term, by))
        if by is SearchBy.provides:
            return [record for record in self.records.values() if record.provides_name(term)]
        return [record for record in self.records.values() if term in record.name]


def local_index() -> ProviderIndex:
    return ProviderIndex(INSTALLED, AVAILABLE)
