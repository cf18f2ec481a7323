"""Minifiers for script and style content.

Each asset-type policy names a default minifier; bundles can override it with
`Bundle.with_minifier`. Errors raised by the underlying libraries surface as
`MinificationError` so callers can tell them apart from I/O failures.
"""

from __future__ import annotations

import logging
from typing import Protocol

from jsmin import jsmin
import rcssmin

from asset_bundler.exceptions import MinificationError

logger = logging.getLogger(__name__)


class Minifier(Protocol):
    """Turns concatenated source text into its minified form."""

    def minify(self, content: str) -> str:
        """Return the minified text."""
        ...


class NullMinifier:
    """Returns content unchanged."""

    def minify(self, content: str) -> str:
        return content


class JsMinMinifier:
    """JavaScript minification via the ``jsmin`` package."""

    def __init__(self, *, quote_chars: str = "'\"`") -> None:
        self.quote_chars = quote_chars

    def minify(self, content: str) -> str:
        try:
            return jsmin(content, quote_chars=self.quote_chars)
        except Exception as e:
            raise MinificationError(f"jsmin failed: {e}") from e


class CssMinMinifier:
    """CSS minification via the ``rcssmin`` package."""

    def __init__(self, *, keep_bang_comments: bool = False) -> None:
        self.keep_bang_comments = keep_bang_comments

    def minify(self, content: str) -> str:
        try:
            return rcssmin.cssmin(content, keep_bang_comments=self.keep_bang_comments)
        except Exception as e:
            raise MinificationError(f"rcssmin failed: {e}") from e


def coerce_minifier(minifier: Minifier | type) -> Minifier:
    """Accept a minifier instance or a zero-argument minifier class."""
    if isinstance(minifier, type):
        minifier = minifier()
    if not callable(getattr(minifier, "minify", None)):
        raise TypeError(f"{type(minifier).__name__} does not implement minify()")
    logger.debug("Using minifier %s", type(minifier).__name__)
    return minifier
