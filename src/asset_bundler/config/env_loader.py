"""Environment variable configuration loading.

This module handles loading configuration from environment variables with
the ASSET_BUNDLER_ prefix, including optional .env file support and type
coercion.
"""

import os
from pathlib import Path
from typing import Any

from .schema import FIELD_NAMES, BundlerSettings

ENV_PREFIX = "ASSET_BUNDLER_"


def env_var_for(field_name: str) -> str:
    """Return the environment variable that feeds ``field_name``."""
    return f"{ENV_PREFIX}{field_name.upper()}"


class EnvironmentConfigLoader:
    """Loads configuration from ASSET_BUNDLER_* environment variables."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file to load first. Values from
                this file never override variables already in the environment.

        Returns:
            Dictionary of configuration values found in environment.
            Only includes fields that are actually set (not defaults).

        Raises:
            ValueError: If environment variables contain invalid values.
        """
        if env_file:
            self._load_env_file(env_file)

        env_values = {
            field_name: os.environ[env_var_for(field_name)]
            for field_name in FIELD_NAMES
            if env_var_for(field_name) in os.environ
        }
        if not env_values:
            return {}

        try:
            settings = BundlerSettings(**env_values)
        except Exception as e:
            env_var_list = [
                f"{env_var_for(name)}={os.environ[env_var_for(name)]}"
                for name in env_values
            ]
            raise ValueError(
                f"Invalid environment variable values: {', '.join(env_var_list)}. "
                f"Error: {e}"
            ) from e

        return {field_name: getattr(settings, field_name) for field_name in env_values}

    def _load_env_file(self, env_file: str | Path) -> None:
        """Load KEY=VALUE lines from a .env file into the environment.

        Raises:
            FileNotFoundError: If the .env file doesn't exist.
            ValueError: If the .env file has invalid format.
        """
        env_path = Path(env_file)
        if not env_path.exists():
            raise FileNotFoundError(f"Environment file not found: {env_path}")

        try:
            with env_path.open(encoding="utf-8") as f:
                for line_num, raw_line in enumerate(f, 1):
                    line = raw_line.strip()
                    if not line or line.startswith("#"):
                        continue
                    if "=" not in line:
                        raise ValueError(
                            f"Invalid format at line {line_num}: {line}. "
                            "Expected KEY=VALUE format."
                        )

                    key, value = (part.strip() for part in line.split("=", 1))
                    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                        value = value[1:-1]

                    if key not in os.environ:
                        os.environ[key] = value
        except OSError as e:
            raise ValueError(f"Failed to read environment file {env_path}: {e}") from e

    def get_env_summary(self) -> dict[str, str]:
        """Return the ASSET_BUNDLER_* variables currently set."""
        return {
            env_var_for(name): os.environ[env_var_for(name)]
            for name in FIELD_NAMES
            if env_var_for(name) in os.environ
        }
