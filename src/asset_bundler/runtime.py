"""Ownership of process-wide bundler state.

A `BundlerRuntime` holds everything bundles share across calls: the bundle
cache, the named-bundle registry, the render-path cache, the cache-renderer
content store, the resolvers and the per-key render locks. Bundles built
without an explicit runtime use the module default, created lazily on first
use and replaced by `reset_runtime()` (test isolation).
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from asset_bundler.cache import BundleCache, InMemoryBundleCache
from asset_bundler.config import FrozenConfig, resolve_frozen_config
from asset_bundler.registries import KeyedOnce, NamedBundleRegistry, RenderPathCache
from asset_bundler.renderers import ContentStore
from asset_bundler.resolvers import RemoteResolver, ResolverRegistry
from asset_bundler.telemetry import TelemetryContext, TelemetryReporter

if TYPE_CHECKING:
    from asset_bundler.telemetry import TelemetryContextProtocol


class BundlerRuntime:
    """Process-wide stores shared by every bundle created against it."""

    def __init__(
        self,
        *,
        bundle_cache: BundleCache | None = None,
        resolvers: ResolverRegistry | None = None,
        reporters: tuple[TelemetryReporter, ...] = (),
        lock_timeout: float | None = None,
    ) -> None:
        self.bundle_cache: BundleCache = (
            bundle_cache if bundle_cache is not None else InMemoryBundleCache()
        )
        self.resolvers = resolvers if resolvers is not None else ResolverRegistry()
        self.named_bundles = NamedBundleRegistry()
        self.render_paths = RenderPathCache()
        self.content_store = ContentStore()
        self.render_locks = KeyedOnce(lock_timeout)
        self.reporters = tuple(reporters)

    @classmethod
    def from_config(
        cls, config: FrozenConfig, *, reporters: tuple[TelemetryReporter, ...] = ()
    ) -> BundlerRuntime:
        """Build a runtime whose timeouts come from ``config``."""
        resolvers = ResolverRegistry(remote=RemoteResolver(config.remote_timeout_seconds))
        return cls(
            resolvers=resolvers,
            reporters=reporters,
            lock_timeout=config.lock_timeout_seconds,
        )

    def telemetry(self) -> TelemetryContextProtocol:
        return TelemetryContext(*self.reporters)

    def clear(self) -> None:
        """Empty every store; resolvers and reporters are kept."""
        self.bundle_cache.clear_testing_cache()
        self.named_bundles.clear()
        self.render_paths.clear()
        self.content_store.clear()


_default_lock = threading.Lock()
_default_runtime: BundlerRuntime | None = None


def get_runtime() -> BundlerRuntime:
    """Return the process default runtime, creating it on first use."""
    global _default_runtime  # noqa: PLW0603
    with _default_lock:
        if _default_runtime is None:
            _default_runtime = BundlerRuntime.from_config(resolve_frozen_config())
        return _default_runtime


def set_runtime(runtime: BundlerRuntime) -> BundlerRuntime | None:
    """Install ``runtime`` as the process default and return the previous one."""
    global _default_runtime  # noqa: PLW0603
    with _default_lock:
        previous = _default_runtime
        _default_runtime = runtime
    return previous


def reset_runtime() -> BundlerRuntime:
    """Replace the default runtime with a fresh one and return it."""
    runtime = BundlerRuntime.from_config(resolve_frozen_config())
    set_runtime(runtime)
    return runtime
