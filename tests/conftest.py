"""
Global test configuration with support for different test types.
"""

from collections.abc import Callable, Generator
from contextlib import contextmanager
import logging
import os
from pathlib import Path
import sys
from unittest.mock import patch

import pytest

from asset_bundler.config import resolve_frozen_config
from asset_bundler.runtime import BundlerRuntime, reset_runtime


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_bundler_env(request, monkeypatch, tmp_path):
    """Ensure a clean ASSET_BUNDLER_* environment for each test.

    - Removes all ASSET_BUNDLER_* variables before each test
    - Points the home config and pyproject lookups at files that do not exist,
      so a developer's real configuration never leaks in

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("ASSET_BUNDLER_"):
            monkeypatch.delenv(key, raising=False)

    isolated = tmp_path / "config_isolated"
    isolated.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("ASSET_BUNDLER_CONFIG_HOME", str(isolated / "asset_bundler.toml"))
    monkeypatch.setenv("ASSET_BUNDLER_PYPROJECT_PATH", str(isolated / "pyproject.toml"))


@pytest.fixture(autouse=True)
def fresh_runtime(isolate_bundler_env) -> Generator[BundlerRuntime]:  # noqa: ARG001
    """Give every test its own process-wide stores."""
    runtime = reset_runtime()
    yield runtime
    runtime.clear()


@pytest.fixture
def isolated_config_sources(tmp_path):
    """Completely isolate configuration sources for testing.

    Returns a helper that writes the given pyproject and home file contents
    and applies the given environment (ASSET_BUNDLER_ prefix added
    automatically) for the duration of a ``with`` block.
    """

    @contextmanager
    def _setup(
        *,
        pyproject_content: str = "",
        home_content: str = "",
        env_vars: dict[str, str] | None = None,
    ) -> Generator[None]:
        clean_env = {
            k: v for k, v in os.environ.items() if not k.startswith("ASSET_BUNDLER_")
        }
        if env_vars:
            for key, value in env_vars.items():
                if not key.startswith("ASSET_BUNDLER_"):
                    key = f"ASSET_BUNDLER_{key.upper()}"
                clean_env[key] = value

        project_dir = tmp_path / "project"
        project_dir.mkdir(exist_ok=True)
        pyproject_path = project_dir / "pyproject.toml"

        home_dir = tmp_path / "home"
        home_dir.mkdir(exist_ok=True)
        home_config_path = home_dir / "asset_bundler.toml"

        if pyproject_content:
            pyproject_path.write_text(pyproject_content)
        if home_content:
            home_config_path.write_text(home_content)

        clean_env["ASSET_BUNDLER_PYPROJECT_PATH"] = str(pyproject_path)
        clean_env["ASSET_BUNDLER_CONFIG_HOME"] = str(home_config_path)

        with patch.dict(os.environ, clean_env, clear=True):
            yield

    return _setup


# --- Site Fixtures ---
@pytest.fixture
def site_root(tmp_path) -> Path:
    """An empty application root for bundles to read from and write into."""
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def write_asset(site_root) -> Callable[[str, str], Path]:
    """Write ``content`` at ``relative`` under the site root and return the path."""

    def _write(relative: str, content: str) -> Path:
        path = site_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")
        return path

    return _write


EMBEDDED_PACKAGE = "bundler_test_widgets"


@pytest.fixture
def embedded_package(tmp_path, monkeypatch) -> Generator[str]:
    """An importable package shipping ``js/widget.js`` and ``css/widget.css``.

    Yields the package name; resource ids look like ``<name>:js/widget.js``.
    """
    package_dir = tmp_path / "pkgs" / EMBEDDED_PACKAGE
    (package_dir / "js").mkdir(parents=True)
    (package_dir / "css").mkdir()
    (package_dir / "__init__.py").write_text("")
    (package_dir / "js" / "widget.js").write_text("var widget = 1;", newline="")
    (package_dir / "css" / "widget.css").write_text(".widget { color: red; }", newline="")

    monkeypatch.syspath_prepend(str(package_dir.parent))
    sys.modules.pop(EMBEDDED_PACKAGE, None)
    yield EMBEDDED_PACKAGE
    sys.modules.pop(EMBEDDED_PACKAGE, None)


@pytest.fixture
def release_config(site_root):
    """Frozen release-mode configuration rooted at the site fixture."""
    return resolve_frozen_config(app_root=str(site_root), debug=False)


@pytest.fixture
def debug_config(site_root):
    """Frozen debug-mode configuration rooted at the site fixture."""
    return resolve_frozen_config(app_root=str(site_root), debug=True)


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Bundles rendered end to end against a temporary site",
        "slow: Tests that take >1 second",
        "allow_env_pollution: Keep the real ASSET_BUNDLER_* environment",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)
