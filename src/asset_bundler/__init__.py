"""Asset bundling for web applications: debug tags or minified, hashed bundles."""

import importlib.metadata
import logging

from asset_bundler.bundle import Bundle, css, javascript
from asset_bundler.config import (
    FrozenConfig,
    ResolvedConfig,
    config_override,
    config_scope,
    resolve_config,
    resolve_frozen_config,
)
from asset_bundler.core.policies import SCRIPT_POLICY, STYLE_POLICY, AssetTypePolicy
from asset_bundler.core.types import DEFAULT_GROUP, Asset, GroupBundle, RenderMode
from asset_bundler.exceptions import (
    AssetBundlerError,
    AssetIOError,
    BundleNotRegisteredError,
    BundleNotRenderedError,
    ConfigurationError,
    MinificationError,
    RenderTimeoutError,
)
from asset_bundler.runtime import BundlerRuntime, get_runtime, reset_runtime, set_runtime
from asset_bundler.telemetry import TelemetryContext, TelemetryReporter

# Version handling
try:
    __version__ = importlib.metadata.version("asset-bundler")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Bundles
    "Bundle",
    "javascript",
    "css",
    "AssetTypePolicy",
    "SCRIPT_POLICY",
    "STYLE_POLICY",
    # Core types
    "Asset",
    "GroupBundle",
    "RenderMode",
    "DEFAULT_GROUP",
    # Runtime
    "BundlerRuntime",
    "get_runtime",
    "set_runtime",
    "reset_runtime",
    # Configuration
    "resolve_config",
    "resolve_frozen_config",
    "config_scope",
    "config_override",
    "ResolvedConfig",
    "FrozenConfig",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "AssetBundlerError",
    "AssetIOError",
    "BundleNotRegisteredError",
    "BundleNotRenderedError",
    "ConfigurationError",
    "MinificationError",
    "RenderTimeoutError",
]
