"""Asset-type policies: what differs between script and style bundles.

A policy is plain configuration injected into `Bundle`: the minifier used
when none is chosen explicitly, the tag template, the prefix that keeps
script and style cache keys apart, and an optional hook that runs on each
file's text before concatenation.
"""

from __future__ import annotations

from collections.abc import Callable
import dataclasses
import os
import posixpath
import re

from asset_bundler.minifiers import CssMinMinifier, JsMinMinifier, Minifier

# (content, source_file, output_file) -> content
type Preprocessor = Callable[[str, str, str], str]


@dataclasses.dataclass(frozen=True, slots=True)
class AssetTypePolicy:
    """Per-asset-type rendering configuration.

    ``tag_template`` is a `str.format` template with ``{attributes}`` (each
    attribute rendered as ``name="value" ``) and ``{path}`` slots.
    """

    name: str
    cache_prefix: str
    tag_template: str
    default_minifier: Callable[[], Minifier]
    preprocess: Preprocessor | None = None

    def fill_template(self, attributes: str, path: str) -> str:
        return self.tag_template.format(attributes=attributes, path=path)


_CSS_URL = re.compile(r"""url\(\s*(?P<quote>['"]?)(?P<target>.*?)(?P=quote)\s*\)""")
_ABSOLUTE_URL = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|/|#)")


def rewrite_css_urls(content: str, source_file: str, output_file: str) -> str:
    """Rewrite relative ``url()`` targets so they resolve from ``output_file``.

    Absolute, rooted, protocol-relative, fragment and ``data:`` URLs are left
    untouched, as is anything when source and output share a directory.
    """
    source_dir = os.path.dirname(os.path.abspath(source_file))
    output_dir = os.path.dirname(os.path.abspath(output_file))
    if source_dir == output_dir:
        return content

    def _rewrite(match: re.Match[str]) -> str:
        quote, target = match.group("quote"), match.group("target").strip()
        if not target or _ABSOLUTE_URL.match(target):
            return match.group(0)

        path, sep, suffix = _split_suffix(target)
        absolute = os.path.normpath(os.path.join(source_dir, path))
        relative = os.path.relpath(absolute, output_dir).replace(os.sep, posixpath.sep)
        return f"url({quote}{relative}{sep}{suffix}{quote})"

    return _CSS_URL.sub(_rewrite, content)


def _split_suffix(target: str) -> tuple[str, str, str]:
    """Split ``a.png?x#y`` into ``("a.png", "?", "x#y")``."""
    match = re.search(r"[?#]", target)
    if match is None:
        return target, "", ""
    return target[: match.start()], match.group(0), target[match.end() :]


SCRIPT_POLICY = AssetTypePolicy(
    name="script",
    cache_prefix="js",
    tag_template='<script type="text/javascript" {attributes}src="{path}"></script>',
    default_minifier=JsMinMinifier,
)

STYLE_POLICY = AssetTypePolicy(
    name="style",
    cache_prefix="css",
    tag_template='<link rel="stylesheet" type="text/css" {attributes}href="{path}" />',
    default_minifier=CssMinMinifier,
    preprocess=rewrite_css_urls,
)
