"""File-based configuration loading with profile support.

This module handles loading configuration from TOML files, supporting both
project-level (pyproject.toml) and home-level (~/.config/asset_bundler.toml)
configuration with named profiles.
"""

import os
from pathlib import Path
import tomllib
from typing import Any

PYPROJECT_PATH_ENV = "ASSET_BUNDLER_PYPROJECT_PATH"
HOME_CONFIG_ENV = "ASSET_BUNDLER_CONFIG_HOME"


class ConfigFileError(Exception):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        """Initialize with file path, message, and optional cause.

        Args:
            file_path: The file that failed to load
            message: Human-readable error message
            cause: The underlying exception that caused the failure
        """
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads configuration from TOML files with profile support.

    Project settings live under ``[tool.asset_bundler]`` in pyproject.toml,
    profiles under ``[tool.asset_bundler.profiles.<name>]``. The home file
    keeps settings at its root and profiles under ``[profiles.<name>]``.
    """

    def load_project_config(
        self, project_root: Path | None = None, profile: str | None = None
    ) -> dict[str, Any]:
        """Load configuration from pyproject.toml in the project root.

        Args:
            project_root: Directory to search for pyproject.toml. If None,
                         searches current directory and parents.
            profile: Optional profile name to load instead of the base table.

        Returns:
            Dictionary of configuration values from the file.
            Empty dict if file doesn't exist or has no asset_bundler section.

        Raises:
            ConfigFileError: If file exists but cannot be parsed, or the
                requested profile is missing.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}

        data = self._read_toml(pyproject_path)
        section = data.get("tool", {}).get("asset_bundler", {})
        if not section:
            return {}
        return self._select_profile(pyproject_path, section, profile)

    def load_home_config(self, profile: str | None = None) -> dict[str, Any]:
        """Load configuration from the home config file.

        Args:
            profile: Optional profile name to load from [profiles.<name>]

        Returns:
            Dictionary of configuration values from the home file.
            Empty dict if file doesn't exist.

        Raises:
            ConfigFileError: If file exists but cannot be parsed.
        """
        home_config_path = self._get_home_config_path()
        if not home_config_path.exists():
            return {}

        data = self._read_toml(home_config_path)
        return self._select_profile(home_config_path, data, profile)

    def list_available_profiles(
        self, project_root: Path | None = None
    ) -> dict[str, list[str]]:
        """List all available profiles from project and home files.

        Unparseable files are skipped rather than reported.
        """
        profiles: dict[str, list[str]] = {"project": [], "home": []}

        pyproject_path = self._find_pyproject_toml(project_root)
        if pyproject_path:
            try:
                data = self._read_toml(pyproject_path)
                section = data.get("tool", {}).get("asset_bundler", {})
                profiles["project"] = list(section.get("profiles", {}))
            except ConfigFileError:
                pass

        home_config_path = self._get_home_config_path()
        if home_config_path.exists():
            try:
                profiles["home"] = list(
                    self._read_toml(home_config_path).get("profiles", {})
                )
            except ConfigFileError:
                pass

        return profiles

    def _read_toml(self, path: Path) -> dict[str, Any]:
        try:
            with path.open(mode="rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(path, f"Failed to parse TOML: {e}", cause=e) from e

    def _select_profile(
        self, path: Path, section: dict[str, Any], profile: str | None
    ) -> dict[str, Any]:
        if profile:
            profiles = section.get("profiles", {})
            if profile not in profiles:
                raise ConfigFileError(
                    path,
                    f"Profile '{profile}' not found. "
                    f"Available profiles: {list(profiles)}",
                )
            return dict(profiles[profile])
        config = dict(section)
        config.pop("profiles", None)
        return config

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Find pyproject.toml by searching up the directory tree.

        ``ASSET_BUNDLER_PYPROJECT_PATH`` short-circuits the search when set.
        """
        explicit = os.environ.get(PYPROJECT_PATH_ENV)
        if explicit:
            path = Path(explicit)
            return path if path.exists() else None

        current = Path(start_dir or Path.cwd()).resolve()
        while current != current.parent:
            pyproject_path = current / "pyproject.toml"
            if pyproject_path.exists():
                return pyproject_path
            current = current.parent
        return None

    def _get_home_config_path(self) -> Path:
        explicit = os.environ.get(HOME_CONFIG_ENV)
        if explicit:
            return Path(explicit)
        return Path.home() / ".config" / "asset_bundler.toml"
