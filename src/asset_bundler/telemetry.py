"""Telemetry context and reporter interfaces.

Render passes are timed and cache hits counted through a `TelemetryContext`.
When disabled (the default) the factory returns a shared no-op object, so the
instrumentation in the hot path costs a method call and nothing more. Set
``ASSET_BUNDLER_TELEMETRY=1`` and pass reporters to enable it.
"""

from collections import deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, runtime_checkable

log = logging.getLogger(__name__)

_scope_stack_var: ContextVar[tuple[str, ...]] = ContextVar(
    "asset_bundler_scope_stack",
    default=(),
)

TELEMETRY_ENV = "ASSET_BUNDLER_TELEMETRY"


def telemetry_enabled() -> bool:
    """Return True when the telemetry environment toggle is set."""
    return os.getenv(TELEMETRY_ENV) == "1"


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """An immutable and stateless no-op context."""

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _EnabledTelemetryContext:
    """Full-featured telemetry context when enabled."""

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager["_EnabledTelemetryContext"]:
        return self._create_scope(name, **metadata)

    @contextmanager
    def _create_scope(
        self, name: str, **metadata: Any
    ) -> Iterator["_EnabledTelemetryContext"]:
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")

        scope_stack = _scope_stack_var.get()
        scope_path = ".".join((*scope_stack, name))
        token = _scope_stack_var.set((*scope_stack, name))
        start_time = time.perf_counter()
        try:
            yield self
        finally:
            duration = time.perf_counter() - start_time
            _scope_stack_var.reset(token)
            self._emit(
                "record_timing",
                scope_path,
                duration,
                depth=len(scope_stack),
                parent_scope=".".join(scope_stack) or None,
                **metadata,
            )

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        """Record a metric within current scope context."""
        scope_stack = _scope_stack_var.get()
        self._emit(
            "record_metric",
            ".".join((*scope_stack, name)),
            value,
            depth=len(scope_stack),
            parent_scope=".".join(scope_stack) or None,
            **metadata,
        )

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Record a counter metric."""
        self.metric(name, increment, metric_type="counter", **metadata)

    def _emit(self, method: str, scope: str, value: Any, **metadata: Any) -> None:
        for reporter in self.reporters:
            try:
                getattr(reporter, method)(scope, value, **metadata)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )


_NO_OP_SINGLETON = _NoOpTelemetryContext()

type TelemetryContextProtocol = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(*reporters: TelemetryReporter) -> TelemetryContextProtocol:  # noqa: N802
    """Return a telemetry context.

    Factory returns either a full-featured context or a shared no-op instance
    when telemetry is disabled or no reporter was supplied.
    """
    if reporters and telemetry_enabled():
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP_SINGLETON


class InMemoryReporter:
    """Reporter that keeps the most recent timings and metrics per scope."""

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = {}
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = {}

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self.timings.setdefault(scope, deque(maxlen=self.max_entries)).append(
            (duration, metadata)
        )

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self.metrics.setdefault(scope, deque(maxlen=self.max_entries)).append(
            (value, metadata)
        )

    def total(self, scope: str) -> float:
        """Sum of numeric metric values recorded under ``scope``."""
        return sum(
            v for v, _ in self.metrics.get(scope, ()) if isinstance(v, int | float)
        )

    def get_report(self) -> str:
        """Render a flat, sorted summary of timings and metrics."""
        lines = ["=== Telemetry Report ==="]
        for scope, values in sorted(self.timings.items()):
            durations = [d for d, _ in values]
            lines.append(
                f"{scope:<40} | Calls: {len(durations):<4} | "
                f"Avg: {sum(durations) / len(durations):.4f}s"
            )
        for scope in sorted(self.metrics):
            lines.append(
                f"{scope:<40} | Count: {len(self.metrics[scope]):<4} | "
                f"Total: {self.total(scope):,.0f}"
            )
        return "\n".join(lines)
