"""Asset and group model plus the per-asset-type policies."""

from .policies import SCRIPT_POLICY, STYLE_POLICY, AssetTypePolicy, rewrite_css_urls
from .types import (
    DEFAULT_GROUP,
    Asset,
    GroupBundle,
    GroupMap,
    InputFile,
    RenderMode,
    fingerprint_groups,
)

__all__ = [  # noqa: RUF022
    "Asset",
    "GroupBundle",
    "GroupMap",
    "InputFile",
    "RenderMode",
    "DEFAULT_GROUP",
    "fingerprint_groups",
    "AssetTypePolicy",
    "SCRIPT_POLICY",
    "STYLE_POLICY",
    "rewrite_css_urls",
]
