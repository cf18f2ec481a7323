"""Configuration resolution with precedence handling.

This module implements the core resolution algorithm that merges configuration
from multiple sources according to the documented precedence order:
Programmatic > Environment > Project file > Home file > Defaults
"""

import logging
import os
from pathlib import Path
from typing import Any

from asset_bundler.exceptions import ConfigurationError

from .env_loader import EnvironmentConfigLoader
from .file_loader import ConfigFileError, FileConfigLoader
from .schema import BundlerSettings
from .types import ConfigOrigin, ResolvedConfig

logger = logging.getLogger(__name__)

PROFILE_ENV = "ASSET_BUNDLER_PROFILE"


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        """Initialize the configuration resolver."""
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        profile: str | None = None,
        use_env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence)
            profile: Profile name to load from files
            use_env_file: Optional .env file to load
            project_root: Directory to search for pyproject.toml

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ConfigurationError: If validation fails.
            ConfigFileError: If the project file is malformed.
            ValueError: If environment variables hold invalid values.
        """
        origin: dict[str, ConfigOrigin] = {}
        merged: dict[str, Any] = {}

        if profile is None:
            profile = os.getenv(PROFILE_ENV)

        # Step 1: schema defaults
        for field, info in BundlerSettings.model_fields.items():
            merged[field] = info.default
            origin[field] = "default"

        def apply(values: dict[str, Any], source: ConfigOrigin) -> None:
            for field, value in values.items():
                if field in merged:  # Only override known fields
                    merged[field] = value
                    origin[field] = source

        # Step 2: home file (errors are non-fatal)
        try:
            apply(self.file_loader.load_home_config(profile=profile), "file")
        except ConfigFileError as e:
            logger.warning("Ignoring home configuration: %s", e)

        # Step 3: project file
        try:
            apply(
                self.file_loader.load_project_config(
                    project_root=project_root, profile=profile
                ),
                "file",
            )
        except ConfigFileError:
            # A broken base table is fatal; a missing profile is not
            if profile is None:
                raise
            logger.warning("Profile '%s' not found in project configuration", profile)

        # Step 4: environment
        try:
            apply(self.env_loader.load_env_config(env_file=use_env_file), "env")
        except (ValueError, FileNotFoundError) as e:
            raise ValueError(f"Environment configuration error: {e}") from e

        # Step 5: programmatic overrides
        if programmatic:
            apply(programmatic, "programmatic")

        # Step 6: validate the merged result
        try:
            validated = BundlerSettings(**merged).to_dict()
        except Exception as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(**validated, origin=origin)

    def list_available_profiles(
        self, project_root: Path | None = None
    ) -> dict[str, list[str]]:
        """List all available profiles from configuration files."""
        return self.file_loader.list_available_profiles(project_root)
