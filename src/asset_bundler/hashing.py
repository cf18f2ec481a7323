"""Content hashing for cache-busting."""

from __future__ import annotations

import hashlib
from typing import Protocol


class Hasher(Protocol):
    """Produces a stable, URL-safe digest of served content."""

    def get_hash(self, content: str) -> str:
        """Return the digest of ``content``."""
        ...


class Sha256Hasher:
    """Hex SHA-256 of the UTF-8 bytes, truncated to ``length`` characters."""

    def __init__(self, length: int = 12) -> None:
        if not 1 <= length <= 64:
            raise ValueError(f"length must be between 1 and 64, got {length}")
        self.length = length

    def get_hash(self, content: str) -> str:
        return hashlib.sha256(content.encode("utf-8")).hexdigest()[: self.length]
