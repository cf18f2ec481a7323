"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from various sources (environment, files, programmatic) into the correct
types with proper defaults.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BundlerSettings(BaseSettings):
    """Pydantic settings schema for bundler configuration.

    This handles validation, type coercion, and default values for all
    configuration fields. It integrates with environment variables using
    the ASSET_BUNDLER_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSET_BUNDLER_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars for forward compatibility
    )

    # --- Render mode ---

    debug: bool = Field(
        default=False,
        description="Render one unminified tag per asset instead of bundles",
    )

    # --- Cache-busting ---

    hash_key_name: str = Field(
        default="r",
        description="Query-string parameter that carries the content hash",
        min_length=1,
    )

    hash_length: int = Field(
        default=12,
        description="Number of hex digits kept from the content digest",
        ge=8,
        le=64,
    )

    render_only_if_missing: bool = Field(
        default=False,
        description="Reuse an existing output file instead of re-minifying",
    )

    # --- Path mapping ---

    app_root: str | None = Field(
        default=None,
        description="File-system directory that '~/' and '/' paths map onto",
    )

    virtual_path: str = Field(
        default="/",
        description="URL prefix that '~/' expands to in rendered tags",
    )

    # --- Bounded operations ---

    remote_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for fetching remote assets",
        gt=0,
    )

    lock_timeout_seconds: float = Field(
        default=30.0,
        description="Maximum wait for a concurrent render of the same key",
        gt=0,
    )

    # --- Validation Rules ---

    @field_validator("virtual_path", mode="before")
    @classmethod
    def normalize_virtual_path(cls, v: Any) -> str:
        """Require a rooted URL prefix and add the trailing slash."""
        if not isinstance(v, str) or not v.startswith("/"):
            raise ValueError(f"virtual_path must start with '/', got {v!r}")
        return v if v.endswith("/") else f"{v}/"

    @field_validator("hash_key_name")
    @classmethod
    def reject_query_delimiters(cls, v: str) -> str:
        """Keep the hash key usable as a bare query-string name."""
        if any(ch in v for ch in "?&=# "):
            raise ValueError(f"hash_key_name contains a reserved character: {v!r}")
        return v

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for SourceMap annotation.

        Returns:
            Dictionary with field names as keys and resolved values.
        """
        return {
            "debug": self.debug,
            "hash_key_name": self.hash_key_name,
            "hash_length": self.hash_length,
            "render_only_if_missing": self.render_only_if_missing,
            "app_root": self.app_root,
            "virtual_path": self.virtual_path,
            "remote_timeout_seconds": self.remote_timeout_seconds,
            "lock_timeout_seconds": self.lock_timeout_seconds,
        }


FIELD_NAMES: tuple[str, ...] = tuple(BundlerSettings.model_fields)
