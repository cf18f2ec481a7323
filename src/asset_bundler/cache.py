"""Bundle cache: rendered output keyed by render key.

Every entry remembers the files its render pass read. When one of them
changes (modification time or size) or disappears, the entry is dropped on
the next lookup and the bundle renders again. This is the only invalidation
the cache performs; there is no expiry.
"""

from __future__ import annotations

from collections.abc import Iterable
import dataclasses
import logging
import os
import threading
from typing import Protocol

from asset_bundler.exceptions import BundleNotRenderedError

logger = logging.getLogger(__name__)

# (mtime_ns, size), or None when the file was missing at capture time
type FileStamp = tuple[int, int] | None


class BundleCache(Protocol):
    """Key-value store of rendered content plus its dependent files."""

    def try_get_value(self, key: str) -> tuple[bool, str | None]:
        """Return ``(True, content)`` on a fresh hit, ``(False, None)`` otherwise."""
        ...

    def add(self, key: str, content: str, dependent_files: Iterable[str]) -> None:
        """Store ``content`` and the files whose change invalidates it."""
        ...

    def get_content(self, key: str) -> str:
        """Return fresh content or raise `BundleNotRenderedError`."""
        ...

    def clear_testing_cache(self) -> None:
        """Drop every entry."""
        ...


def _stamp(path: str) -> FileStamp:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


@dataclasses.dataclass(frozen=True, slots=True)
class _Entry:
    content: str
    stamps: tuple[tuple[str, FileStamp], ...]

    def is_fresh(self) -> bool:
        return all(_stamp(path) == stamp for path, stamp in self.stamps)


class InMemoryBundleCache:
    """Thread-safe, process-local implementation of `BundleCache`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def try_get_value(self, key: str) -> tuple[bool, str | None]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return False, None
        if not entry.is_fresh():
            logger.debug("Dependent files changed; evicting %s", key)
            with self._lock:
                # Only evict the entry we checked; a newer one may have landed
                if self._entries.get(key) is entry:
                    del self._entries[key]
            return False, None
        return True, entry.content

    def add(self, key: str, content: str, dependent_files: Iterable[str]) -> None:
        unique = dict.fromkeys(dependent_files)
        entry = _Entry(content, tuple((path, _stamp(path)) for path in unique))
        with self._lock:
            self._entries[key] = entry

    def get_content(self, key: str) -> str:
        found, content = self.try_get_value(key)
        if not found or content is None:
            raise BundleNotRenderedError(key)
        return content

    def contains(self, key: str) -> bool:
        return self.try_get_value(key)[0]

    def clear_testing_cache(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
