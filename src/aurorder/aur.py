"""Client for the AUR RPC interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from requests import RequestException, get

from . import __version__
from .models import PackageRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_BASEURL = "https://aur.archlinux.org"
RPC_VERSION = 5
# Servers reject overly long query strings, so info requests are split near this length.
MAX_QUERY_LENGTH = 4000
HTTP_OK = 200
HTTP_TOO_MANY_REQUESTS = 429


class TransportError(RuntimeError):
    """The AUR could not be reached or refused to answer."""


class SearchBy(str, Enum):
    """Fields the AUR can search by."""

    name = "name"
    name_desc = "name-desc"
    maintainer = "maintainer"
    depends = "depends"
    makedepends = "makedepends"
    optdepends = "optdepends"
    checkdepends = "checkdepends"
    provides = "provides"


class RpcPackage(BaseModel):
    """A package entry of an RPC response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(alias="Name")
    version: str = Field(alias="Version")
    package_base: str | None = Field(default=None, alias="PackageBase")
    description: str | None = Field(default=None, alias="Description")
    url_path: str | None = Field(default=None, alias="URLPath")
    maintainer: str | None = Field(default=None, alias="Maintainer")
    depends: list[str] = Field(default_factory=list, alias="Depends")
    makedepends: list[str] = Field(default_factory=list, alias="MakeDepends")
    checkdepends: list[str] = Field(default_factory=list, alias="CheckDepends")
    optdepends: list[str] = Field(default_factory=list, alias="OptDepends")
    provides: list[str] = Field(default_factory=list, alias="Provides")

    def to_record(self) -> PackageRecord:
        """Convert the wire representation into a package record."""
        return PackageRecord(
            name=self.name,
            version=self.version,
            pkgbase=self.package_base,
            description=self.description or "",
            urlpath=self.url_path or "",
            depends=self.depends,
            makedepends=self.makedepends,
            checkdepends=self.checkdepends,
            optdepends=self.optdepends,
            provides=self.provides,
        )


class RpcResponse(BaseModel):
    """The envelope of every RPC response."""

    model_config = ConfigDict(extra="ignore")

    type: str
    error: str | None = None
    resultcount: int = 0
    results: list[RpcPackage] = []
    version: int | None = None


class MetadataSource(ABC):
    """Interface of a remote package metadata service."""

    @abstractmethod
    def info(self, names: Sequence[str]) -> list[PackageRecord]:
        """Fetch the full records of the named packages.

        Names the service does not know are simply absent from the result.
        """
        raise NotImplementedError

    @abstractmethod
    def search(self, term: str, by: SearchBy = SearchBy.name_desc) -> list[PackageRecord]:
        """Search the service."""
        raise NotImplementedError


def _encoded_arg(name: str) -> str:
    return f"arg%5B%5D={quote(name, safe='')}"


def chunk_names(names: Iterable[str], max_length: int = MAX_QUERY_LENGTH) -> list[list[str]]:
    """Split names into groups whose encoded query strings stay near ``max_length``.

    A single name longer than the limit still gets a group of its own.
    """
    chunks: list[list[str]] = []
    current: list[str] = []
    length = 0
    for name in names:
        arg_length = len(_encoded_arg(name)) + 1
        if current and length + arg_length > max_length:
            chunks.append(current)
            current = []
            length = 0
        current.append(name)
        length += arg_length
    if current:
        chunks.append(current)
    return chunks


class AurClient(MetadataSource):
    """Talks to the RPC endpoint of an AUR instance."""

    def __init__(
        self,
        baseurl: str = DEFAULT_BASEURL,
        timeout: float = 10,
        max_connections: int = 20,
    ) -> None:
        """Initialize the client.

        Args:
            baseurl: Base URL of the AUR instance
            timeout: Connect timeout in seconds
            max_connections: Maximum number of requests in flight at once

        """
        self.baseurl: str = baseurl.rstrip("/")
        self.timeout: float = timeout
        self.max_connections: int = max(1, max_connections)

    @property
    def rpc_url(self) -> str:
        return f"{self.baseurl}/rpc"

    def _query(self, params: list[tuple[str, str | int]]) -> RpcResponse:
        logger.debug("GET %s %s", self.rpc_url, params)
        try:
            response = get(
                self.rpc_url,
                params=params,
                timeout=self.timeout,
                headers={"User-Agent": f"aurorder/{__version__}"},
            )
        except RequestException as e:
            msg = f"request to {self.rpc_url} failed: {e}"
            raise TransportError(msg) from e
        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            msg = "Too many requests: the AUR has throttled your IP."
            raise TransportError(msg)
        if response.status_code != HTTP_OK:
            msg = f"unexpected HTTP status code {response.status_code}"
            raise TransportError(msg)
        try:
            rpc = RpcResponse.model_validate_json(response.content)
        except ValidationError as e:
            msg = f"malformed response from {self.rpc_url}: {e}"
            raise TransportError(msg) from e
        if rpc.type == "error" or rpc.error:
            msg = rpc.error or "the AUR returned an error"
            raise TransportError(msg)
        return rpc

    def _info_chunk(self, names: list[str]) -> list[PackageRecord]:
        params: list[tuple[str, str | int]] = [("v", RPC_VERSION), ("type", "info")]
        params.extend(("arg[]", name) for name in names)
        return [package.to_record() for package in self._query(params).results]

    def info(self, names: Sequence[str]) -> list[PackageRecord]:
        """Fetch records for ``names``, splitting long requests and issuing them concurrently.

        Raises:
            TransportError: if any of the requests fails.

        """
        chunks = chunk_names(dict.fromkeys(names))
        if not chunks:
            return []
        if len(chunks) == 1:
            return self._info_chunk(chunks[0])
        logger.debug("Splitting info request for %d packages into %d requests", len(names), len(chunks))
        with ThreadPoolExecutor(max_workers=min(self.max_connections, len(chunks))) as executor:
            futures = [executor.submit(self._info_chunk, chunk) for chunk in chunks]
            results: list[PackageRecord] = []
            for future in futures:
                results.extend(future.result())
        return results

    def search(self, term: str, by: SearchBy = SearchBy.name_desc) -> list[PackageRecord]:
        """Search the AUR.

        Search results carry no dependency information; use :meth:`info` for full records.

        Raises:
            TransportError: if the request fails.

        """
        params: list[tuple[str, str | int]] = [("v", RPC_VERSION), ("type", "search"), ("by", by.value), ("arg", term)]
        return [package.to_record() for package in self._query(params).results]
