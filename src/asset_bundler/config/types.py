"""Core configuration data types for the asset bundler.

This module defines the fundamental data structures used throughout the configuration
system, following the resolve-once, freeze-then-flow pattern.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

# --- Core Configuration Data ---


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing.

    This represents the validated, merged result of combining programmatic overrides,
    environment variables, files, and defaults. It includes audit metadata for
    observability.
    """

    debug: bool
    hash_key_name: str
    hash_length: int
    render_only_if_missing: bool
    app_root: str | None
    virtual_path: str
    remote_timeout_seconds: float
    lock_timeout_seconds: float

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by bundles.

        Returns:
            FrozenConfig with the same field values, excluding audit metadata.
        """
        values = self._asdict()
        values.pop("origin")
        return FrozenConfig(**values)

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Create a new ResolvedConfig with programmatic overrides applied.

        This is useful for scoped configuration changes or test setup.

        Args:
            **overrides: Field values to override. Unknown fields are ignored.

        Returns:
            New ResolvedConfig with overrides applied and origin updated.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)

        for field, value in overrides.items():
            if field in new_values and field != "origin":
                new_values[field] = value
                new_origin[field] = "programmatic"

        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Generate a report showing the origin of each field.

        Returns:
            Human-readable audit report, one ``field: origin:value`` per line.
        """
        lines = []
        for field in self._fields:
            if field == "origin" or field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if origin == "env":
                value_display = f"env:ASSET_BUNDLER_{field.upper()}={value}"
            else:
                value_display = f"{origin}:{value}"
            lines.append(f"{field}: {value_display}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to bundles and their runtime.

    Contains only the field values without audit metadata. Any attempt to
    modify this object will raise an exception.
    """

    debug: bool = False
    hash_key_name: str = "r"
    hash_length: int = 12
    render_only_if_missing: bool = False
    app_root: str | None = None
    virtual_path: str = "/"
    remote_timeout_seconds: float = 10.0
    lock_timeout_seconds: float = 30.0
