"""Exceptions raised by the asset bundler."""


class AssetBundlerError(Exception):
    """Base exception for asset bundling errors."""


class ConfigurationError(AssetBundlerError):
    """Raised when bundler configuration is invalid."""


class BundleNotRegisteredError(AssetBundlerError, KeyError):
    """Raised when a named bundle is rendered before it was persisted.

    This is a programming error: `as_named` or `as_cached` must run before
    `render_named`, `render_cached` or `render_cached_asset_tag` for the
    same name.
    """

    def __init__(self, name: str) -> None:
        """Record the missing registry key."""
        self.name = name
        super().__init__(
            f"No bundle has been persisted under '{name}'. "
            "Call as_named() or as_cached() before rendering it by name."
        )

    def __str__(self) -> str:
        """Avoid KeyError's repr-style message."""
        return str(self.args[0])


class BundleNotRenderedError(AssetBundlerError):
    """Raised when cached output for a named bundle is no longer available."""

    def __init__(self, key: str) -> None:
        """Record the cache key that missed."""
        self.key = key
        super().__init__(f"No rendered content is cached under '{key}'")


class AssetIOError(AssetBundlerError):
    """Raised when an asset location cannot be read or fetched"""  # noqa: D415


class MinificationError(AssetBundlerError):
    """Raised when a minifier rejects its input"""  # noqa: D415


class RenderTimeoutError(AssetBundlerError):
    """Raised when waiting on a concurrent render of the same key times out."""

    def __init__(self, key: str, timeout: float) -> None:
        """Record which key was busy and for how long we waited."""
        self.key = key
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout:.1f}s waiting for render of '{key}'"
        )
