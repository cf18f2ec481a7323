"""Public API for the configuration system.

This module provides the main entry points for configuration resolution,
including the resolve_config() function and profile management utilities.
"""

import os
from pathlib import Path
from typing import Any

from .resolver import PROFILE_ENV, ConfigResolver
from .scope import get_ambient_resolved_config
from .types import FrozenConfig, ResolvedConfig

# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    profile: str | None = None,
    use_env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > Project file > Home file > Defaults.
    Inside a `config_scope`, the scoped configuration replaces file and
    environment resolution and only `programmatic` is applied on top.

    Args:
        programmatic: Dictionary of programmatic overrides (highest precedence).
                     Only known configuration fields are used.
        profile: Profile name to load from configuration files. If None,
                uses ASSET_BUNDLER_PROFILE environment variable if set.
        use_env_file: Optional path to .env file to load before reading
                     environment variables.
        project_root: Directory to search for pyproject.toml. If None,
                     searches current directory and parents.

    Returns:
        ResolvedConfig with merged values and source tracking for audit.

    Example:
        config = resolve_config({"debug": True})
        frozen = config.to_frozen()
    """
    ambient_config = get_ambient_resolved_config()
    if ambient_config is not None:
        if programmatic:
            return ambient_config.with_overrides(**programmatic)
        return ambient_config

    return _resolver.resolve(
        programmatic=programmatic,
        profile=profile,
        use_env_file=use_env_file,
        project_root=project_root,
    )


def resolve_frozen_config(**overrides: Any) -> FrozenConfig:
    """Resolve and freeze in one step; keyword arguments are programmatic overrides."""
    return resolve_config(overrides or None).to_frozen()


def list_available_profiles(project_root: Path | None = None) -> dict[str, list[str]]:
    """List all available configuration profiles.

    Returns:
        Dictionary with 'project' and 'home' keys containing lists of
        available profile names from each source.
    """
    return _resolver.list_available_profiles(project_root)


def get_effective_profile() -> str | None:
    """Return the profile named by ASSET_BUNDLER_PROFILE, if set."""
    return os.getenv(PROFILE_ENV) or None
