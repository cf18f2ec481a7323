"""Resolvers turn an asset reference into concrete, readable files.

Resolution never raises for "nothing found": a reference that matches no
file yields an empty list, and the bundle renders without it. Failures to
*fetch* something that exists (HTTP errors, timeouts) do raise.

Bundles resolve only local and embedded assets; remote assets are emitted
as tags and never concatenated. `RemoteResolver` is here for callers that
want a local copy of a remote asset.
"""

from __future__ import annotations

import glob
from importlib import resources
import logging
import os
from pathlib import Path
import tempfile
from typing import TYPE_CHECKING, Protocol

import httpx

from asset_bundler.exceptions import AssetIOError

if TYPE_CHECKING:
    from asset_bundler.core.types import AssetKind

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")


class Resolver(Protocol):
    """Maps one reference to zero or more readable file paths."""

    def try_resolve(self, reference: str) -> list[str]:
        """Return the files behind ``reference``; empty when there are none."""
        ...


class FileSystemResolver:
    """Resolves files, directories (their direct files) and glob patterns."""

    def try_resolve(self, reference: str) -> list[str]:
        if _GLOB_CHARS.intersection(reference):
            return sorted(p for p in glob.glob(reference, recursive=True) if os.path.isfile(p))

        path = Path(reference)
        if path.is_file():
            return [str(path)]
        if path.is_dir():
            return sorted(str(p) for p in path.iterdir() if p.is_file())
        return []


class RemoteResolver:
    """Downloads a URL into a temporary file."""

    def __init__(
        self,
        timeout: float = 10.0,
        *,
        transport: httpx.BaseTransport | None = None,
        download_dir: str | Path | None = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport
        self.download_dir = Path(download_dir) if download_dir else None

    def _create_http_client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self.transport)

    def try_resolve(self, reference: str) -> list[str]:
        try:
            with self._create_http_client() as client:
                response = client.get(reference, follow_redirects=True)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise AssetIOError(f"Timed out fetching {reference}") from e
        except httpx.HTTPStatusError as e:
            raise AssetIOError(
                f"HTTP error {e.response.status_code}: {reference}"
            ) from e
        except httpx.HTTPError as e:
            raise AssetIOError(f"Failed to fetch {reference}: {e}") from e

        suffix = Path(httpx.URL(reference).path).suffix
        fd, name = tempfile.mkstemp(suffix=suffix, dir=self.download_dir)
        with os.fdopen(fd, "wb") as fh:
            fh.write(response.content)
        logger.debug("Downloaded %s to %s", reference, name)
        return [name]


class EmbeddedResourceResolver:
    """Reads package data through `importlib.resources`.

    Identifiers look like ``package.name:path/inside/package.js`` or
    ``package.name/path/inside/package.js``. Resources that are not plain
    files on disk (zipped packages) are copied to a temporary file.
    """

    def __init__(self, extract_dir: str | Path | None = None) -> None:
        self.extract_dir = Path(extract_dir) if extract_dir else None

    @staticmethod
    def split_identifier(identifier: str) -> tuple[str, str]:
        if ":" in identifier:
            package, _, resource = identifier.partition(":")
        else:
            package, _, resource = identifier.partition("/")
        if not package or not resource:
            raise ValueError(f"Invalid embedded resource identifier: {identifier!r}")
        return package, resource

    def try_resolve(self, reference: str) -> list[str]:
        package, resource = self.split_identifier(reference)
        try:
            traversable = resources.files(package).joinpath(resource)
        except (ModuleNotFoundError, TypeError):
            logger.warning("Package %s for embedded resource not found", package)
            return []

        if not traversable.is_file():
            return []
        if isinstance(traversable, Path):
            return [str(traversable)]

        fd, name = tempfile.mkstemp(suffix=Path(resource).suffix, dir=self.extract_dir)
        with os.fdopen(fd, "wb") as fh:
            fh.write(traversable.read_bytes())
        return [name]


class ResolverRegistry:
    """Selects the resolver for an asset kind; injectable for tests."""

    def __init__(
        self,
        *,
        local: Resolver | None = None,
        remote: Resolver | None = None,
        embedded: Resolver | None = None,
    ) -> None:
        self._resolvers: dict[str, Resolver] = {
            "local": local or FileSystemResolver(),
            "remote": remote or RemoteResolver(),
            "embedded": embedded or EmbeddedResourceResolver(),
        }

    def get(self, kind: AssetKind) -> Resolver:
        return self._resolvers[kind]

    def set(self, kind: AssetKind, resolver: Resolver) -> None:
        if kind not in self._resolvers:
            raise KeyError(kind)
        self._resolvers[kind] = resolver
