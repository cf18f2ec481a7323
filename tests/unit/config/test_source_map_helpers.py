"""Tests for origin tracking on resolved configuration.

These tests validate that every field records which source supplied it and
that the audit report and override helper keep that record accurate.
"""

import os
from unittest.mock import patch

import pytest

from asset_bundler.config import resolve_config
from asset_bundler.config.env_loader import EnvironmentConfigLoader, env_var_for

pytestmark = pytest.mark.unit


def test_every_field_has_an_origin():
    resolved = resolve_config()
    fields = set(resolved._fields) - {"origin"}
    assert set(resolved.origin) == fields


def test_with_overrides_marks_fields_programmatic():
    resolved = resolve_config().with_overrides(debug=True, unknown="ignored")

    assert resolved.debug is True
    assert resolved.origin["debug"] == "programmatic"
    assert resolved.origin["hash_key_name"] == "default"
    assert not hasattr(resolved, "unknown")


def test_audit_names_environment_variables():
    with patch.dict(os.environ, {"ASSET_BUNDLER_HASH_KEY_NAME": "v"}):
        report = resolve_config().audit()

    assert "hash_key_name: env:ASSET_BUNDLER_HASH_KEY_NAME=v" in report.splitlines()
    assert "debug: default:False" in report.splitlines()


def test_env_summary_lists_only_known_variables():
    with patch.dict(
        os.environ,
        {"ASSET_BUNDLER_DEBUG": "1", "ASSET_BUNDLER_SOMETHING_ELSE": "x"},
    ):
        summary = EnvironmentConfigLoader().get_env_summary()

    assert summary == {env_var_for("debug"): "1"}
