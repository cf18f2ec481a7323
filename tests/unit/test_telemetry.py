import logging

import pytest

from asset_bundler.telemetry import (
    InMemoryReporter,
    TelemetryContext,
    telemetry_enabled,
)

pytestmark = pytest.mark.unit


class _BrokenReporter:
    def record_timing(self, scope, duration, **metadata):
        raise RuntimeError("reporter down")

    def record_metric(self, scope, value, **metadata):
        raise RuntimeError("reporter down")


def test_disabled_by_default_returns_shared_no_op():
    reporter = InMemoryReporter()

    assert telemetry_enabled() is False
    tele = TelemetryContext(reporter)
    assert tele is TelemetryContext()

    with tele("bundle.render"):
        tele.count("bundle.cache_hit")

    assert reporter.timings == {}
    assert reporter.metrics == {}


def test_enabled_context_records_nested_scopes(monkeypatch):
    monkeypatch.setenv("ASSET_BUNDLER_TELEMETRY", "1")
    reporter = InMemoryReporter()
    tele = TelemetryContext(reporter)

    with tele("bundle.render"):
        tele.count("bundle.cache_miss")
        with tele("bundle.render_release"):
            pass

    assert set(reporter.timings) == {
        "bundle.render",
        "bundle.render.bundle.render_release",
    }
    assert reporter.total("bundle.render.bundle.cache_miss") == 1
    assert "bundle.render" in reporter.get_report()


def test_reporter_failures_are_logged_not_raised(monkeypatch, caplog):
    monkeypatch.setenv("ASSET_BUNDLER_TELEMETRY", "1")
    tele = TelemetryContext(_BrokenReporter())

    with caplog.at_level(logging.ERROR, logger="asset_bundler.telemetry"):
        with tele("bundle.render"):
            tele.metric("size", 10)

    assert "reporter down" in caplog.text


def test_scope_name_must_be_non_empty(monkeypatch):
    monkeypatch.setenv("ASSET_BUNDLER_TELEMETRY", "1")
    tele = TelemetryContext(InMemoryReporter())

    with pytest.raises(ValueError, match="Scope name"), tele(""):
        pass
