"""Renderers persist bundle output.

`FileRenderer` writes the artifact to disk so a web server can serve it.
`CacheRenderer` keeps it in memory, under the bundle's cache prefix and name,
for applications that serve bundles from a handler instead of static files.
"""

from __future__ import annotations

import logging
from pathlib import Path
import threading
from typing import Protocol

from asset_bundler.exceptions import BundleNotRenderedError

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Persists final bundle text at a destination."""

    def render(self, content: str, destination: str) -> None:
        """Store ``content`` for ``destination``."""
        ...


class FileRenderer:
    """Writes content as UTF-8 text, creating parent directories."""

    def render(self, content: str, destination: str) -> None:
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %d chars to %s", len(content), path)


class ContentStore:
    """Process-wide store for content rendered by `CacheRenderer`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._content: dict[str, str] = {}

    @staticmethod
    def key(prefix: str, name: str) -> str:
        return f"{prefix}{name}"

    def set(self, prefix: str, name: str, content: str) -> None:
        with self._lock:
            self._content[self.key(prefix, name)] = content

    def get(self, prefix: str, name: str) -> str:
        """Return stored content.

        Raises:
            BundleNotRenderedError: If nothing was rendered under the name.
        """
        key = self.key(prefix, name)
        with self._lock:
            try:
                return self._content[key]
            except KeyError:
                raise BundleNotRenderedError(key) from None

    def clear(self) -> None:
        with self._lock:
            self._content.clear()


class CacheRenderer:
    """Stores content in a `ContentStore`; the destination is ignored."""

    def __init__(self, prefix: str, name: str, store: ContentStore) -> None:
        self.prefix = prefix
        self.name = name
        self.store = store

    def render(self, content: str, destination: str) -> None:  # noqa: ARG002
        self.store.set(self.prefix, self.name, content)
