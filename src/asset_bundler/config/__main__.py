"""CLI entry point for configuration introspection.

Usage:
    python -m asset_bundler.config
    python -m asset_bundler.config --json
    python -m asset_bundler.config --profiles
"""

import sys

from .introspection import main

if __name__ == "__main__":
    sys.exit(main())
