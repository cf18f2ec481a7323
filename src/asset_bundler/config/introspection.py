"""Configuration introspection utilities for debugging and validation."""

import argparse
import json
import sys
from typing import Any

from .api import get_effective_profile, list_available_profiles, resolve_config

# ruff: noqa: T201


def get_config_info(*, profile: str | None = None) -> dict[str, Any]:
    """Get structured configuration information for programmatic use.

    Returns:
        Dictionary with a ``status`` key and either the effective values and
        their sources, or the resolution error.
    """
    try:
        resolved = resolve_config(profile=profile)
    except Exception as e:
        return {"status": "invalid", "error": str(e), "config": None, "sources": {}}

    config = resolved._asdict()
    config.pop("origin")
    return {
        "status": "valid",
        "profile": profile or get_effective_profile(),
        "config": config,
        "sources": dict(resolved.origin),
    }


def main(argv: list[str] | None = None) -> int:
    """Print the effective configuration; exit non-zero when it is invalid."""
    parser = argparse.ArgumentParser(
        prog="python -m asset_bundler.config",
        description="Show the effective asset bundler configuration.",
    )
    parser.add_argument("--profile", help="Configuration profile to resolve")
    parser.add_argument("--json", action="store_true", help="Emit JSON")
    parser.add_argument(
        "--profiles", action="store_true", help="List available profiles and exit"
    )
    args = parser.parse_args(argv)

    if args.profiles:
        profiles = list_available_profiles()
        if args.json:
            print(json.dumps(profiles, indent=2))
        else:
            print(f"project: {', '.join(profiles['project']) or '-'}")
            print(f"home: {', '.join(profiles['home']) or '-'}")
        return 0

    info = get_config_info(profile=args.profile)
    if args.json:
        print(json.dumps(info, indent=2, default=str))
    elif info["status"] == "valid":
        print("=== Effective Configuration ===")
        for field, value in info["config"].items():
            print(f"  {field}: {value} ({info['sources'].get(field, 'default')})")
    else:
        print(f"Configuration error: {info['error']}", file=sys.stderr)

    return 0 if info["status"] == "valid" else 1
