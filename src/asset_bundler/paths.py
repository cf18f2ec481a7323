"""App-relative path mapping.

Asset and destination references come in three shapes:

- ``~/js/site.js``: relative to the application root. In URLs ``~/`` becomes
  the configured virtual path; on disk it becomes the app root.
- ``/js/site.js``: rooted at the site. On disk it maps under the app root.
- anything else: used as-is in URLs and resolved against the app root on disk
  when relative.

Query strings and fragments never reach the file system.
"""

from __future__ import annotations

from pathlib import Path

from asset_bundler.config import FrozenConfig


class PathMapper:
    """Translates asset references into URLs and file-system paths."""

    def __init__(self, app_root: str | Path | None = None, virtual_path: str = "/"):
        self.app_root = Path(app_root).absolute() if app_root else Path.cwd()
        self.virtual_path = virtual_path if virtual_path.endswith("/") else f"{virtual_path}/"

    @classmethod
    def from_config(cls, config: FrozenConfig) -> PathMapper:
        return cls(config.app_root, config.virtual_path)

    def expand(self, reference: str) -> str:
        """Return the URL form of ``reference`` (``~/`` replaced by the virtual path)."""
        if reference.startswith("~/"):
            return self.virtual_path + reference[2:]
        return reference

    def to_filesystem(self, reference: str) -> str:
        """Return the file-system path for ``reference``.

        The query string is dropped. A ``#`` is kept because it is the
        hash-in-filename placeholder, not a fragment.
        """
        path = reference.split("?", 1)[0]
        if path.startswith("~/"):
            return str(self.app_root / path[2:])
        if path.startswith("/"):
            # Absolute paths already under the app root pass through
            if Path(path).is_relative_to(self.app_root):
                return path
            return str(self.app_root / path.lstrip("/"))
        return str(self.app_root / path)
