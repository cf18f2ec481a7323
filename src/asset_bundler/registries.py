"""Process-wide registries shared by every bundle of a runtime.

These registries are owned by a `BundlerRuntime` and are plain
in-memory maps. Each guards its map with its own lock; the locks are held
only for the dictionary operation, never while a bundle renders. Render
computation is serialized per key by `KeyedOnce`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import threading

from asset_bundler.core.types import GroupMap, snapshot_groups
from asset_bundler.exceptions import BundleNotRegisteredError, RenderTimeoutError


class NamedBundleRegistry:
    """Maps ``cache_prefix + name`` to the group map captured at persist time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._groups: dict[str, GroupMap] = {}

    def set(self, key: str, groups: GroupMap) -> None:
        """Store a deep copy of ``groups`` under ``key``."""
        snapshot = snapshot_groups(groups)
        with self._lock:
            self._groups[key] = snapshot

    def get(self, key: str) -> GroupMap:
        """Return a copy of the stored group map.

        Raises:
            BundleNotRegisteredError: If nothing was persisted under ``key``.
        """
        with self._lock:
            groups = self._groups.get(key)
        if groups is None:
            raise BundleNotRegisteredError(key)
        return snapshot_groups(groups)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._groups

    def clear(self) -> None:
        with self._lock:
            self._groups.clear()


class RenderPathCache:
    """Remembers the destination first used for a group's render key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._paths: dict[str, str] = {}

    @staticmethod
    def key(prefix: str, group: str, render_key: str) -> str:
        return f"{prefix}.{group}.{render_key}"

    def remember(self, key: str, destination: str) -> None:
        with self._lock:
            self._paths[key] = destination

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._paths.get(key)

    def clear(self) -> None:
        with self._lock:
            self._paths.clear()


class KeyedOnce:
    """Per-key mutual exclusion for "compute once, everyone else reuses".

    Callers check the cache, enter `hold(key)`, check again, and compute
    only if the second check still misses. Different keys never contend.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._waiters: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str, timeout: float | None = None) -> Iterator[None]:
        """Hold the lock for ``key``.

        Raises:
            RenderTimeoutError: If the lock is not acquired within the timeout.
        """
        timeout = self.timeout if timeout is None else timeout
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1

        try:
            acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
            if not acquired:
                raise RenderTimeoutError(key, timeout or 0.0)
            try:
                yield
            finally:
                lock.release()
        finally:
            with self._guard:
                self._waiters[key] -= 1
                if not self._waiters[key]:
                    del self._waiters[key]
                    del self._locks[key]

    def pending(self) -> int:
        """Number of keys with a holder or waiter."""
        with self._guard:
            return len(self._locks)
