"""Configuration scoping for entry-time overrides.

A scope only affects resolution at entry time: once a FrozenConfig is handed
to a bundle, ambient changes are not observed by it.
"""

from collections.abc import Generator
from contextlib import contextmanager
import contextvars
from typing import Any

from .types import ResolvedConfig

_ambient_resolved_config: contextvars.ContextVar[ResolvedConfig] = (
    contextvars.ContextVar("asset_bundler_resolved_config")
)


def get_ambient_resolved_config() -> ResolvedConfig | None:
    """Return the configuration set by an enclosing scope, if any."""
    try:
        return _ambient_resolved_config.get()
    except LookupError:
        return None


@contextmanager
def config_scope(config: ResolvedConfig) -> Generator[None]:
    """Temporarily use a different resolved configuration.

    Args:
        config: The ResolvedConfig to use within this scope

    Example:
        base_config = resolve_config()
        with config_scope(base_config.with_overrides(debug=True)):
            bundle = javascript()  # Renders in debug mode
    """
    token = _ambient_resolved_config.set(config)
    try:
        yield
    finally:
        _ambient_resolved_config.reset(token)


@contextmanager
def config_override(**overrides: Any) -> Generator[None]:
    """Convenience context manager for programmatic config overrides.

    Example:
        with config_override(debug=True, hash_key_name="v"):
            config = resolve_config()
    """
    base_config = get_ambient_resolved_config()
    if base_config is None:
        # Import here to avoid circular dependency at module level
        from .api import resolve_config

        base_config = resolve_config()

    with config_scope(base_config.with_overrides(**overrides)):
        yield
