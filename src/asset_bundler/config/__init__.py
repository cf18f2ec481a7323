"""Configuration management for the asset bundler.

Resolve once, freeze, then hand the frozen value to bundles:

- ResolvedConfig: Post-resolution configuration with audit metadata
- FrozenConfig: Immutable configuration consumed by bundles and runtimes
- SourceMap: Audit tracking of configuration value origins
"""

from .api import (
    get_effective_profile,
    list_available_profiles,
    resolve_config,
    resolve_frozen_config,
)
from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver
from .schema import BundlerSettings
from .scope import config_override, config_scope, get_ambient_resolved_config
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [  # noqa: RUF022
    # Main API
    "resolve_config",
    "resolve_frozen_config",
    "list_available_profiles",
    "get_effective_profile",
    # Scoping
    "config_scope",
    "config_override",
    "get_ambient_resolved_config",
    # Core types
    "ResolvedConfig",
    "FrozenConfig",
    "SourceMap",
    "ConfigOrigin",
    # Advanced usage
    "BundlerSettings",
    "ConfigResolver",
    "FileConfigLoader",
    "ConfigFileError",
]
