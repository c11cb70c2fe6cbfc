"""Maintenance of the thumbnail directory.

Lists and removes cached thumbnails. Only files named like a cached
thumbnail (`{md5}_{md5}.{ext}`) are considered; anything else in the
directory is left alone.
"""

import re
from pathlib import Path
from typing import Any

from loguru import logger

from thumbcache.core.fingerprint import THUMB_NAME_PATTERN, source_key

_THUMB_NAME_RE = re.compile(THUMB_NAME_PATTERN)


class ThumbManager:
    """Finds and clears cached thumbnails in one target directory."""

    def __init__(self, target_dir: str | Path):
        self._target_dir = Path(target_dir)

    @property
    def target_dir(self) -> Path:
        return self._target_dir

    def get_all(self) -> list[Path]:
        """All cached thumbnails, sorted by name."""
        if not self._target_dir.is_dir():
            return []
        return sorted(
            p for p in self._target_dir.iterdir() if p.is_file() and _THUMB_NAME_RE.match(p.name)
        )

    def get(self, source: str) -> list[Path]:
        """Cached thumbnails rendered from `source` (as stored by ThumbCreator)."""
        prefix = f"{source_key(str(source))}_"
        return [p for p in self.get_all() if p.name.startswith(prefix)]

    def clear(self, source: str) -> int:
        """Delete the thumbnails of `source`. Returns count deleted."""
        count = self._delete(self.get(source))
        logger.info(f"Cleared {count} thumbnail(s) of {source}")
        return count

    def clear_all(self) -> int:
        """Delete every cached thumbnail. Returns count deleted."""
        count = self._delete(self.get_all())
        logger.info(f"Cleared {count} thumbnail(s) from {self._target_dir}")
        return count

    def stats(self) -> dict[str, Any]:
        """Number of cached thumbnails and their total size in bytes."""
        files = self.get_all()
        return {
            "entries": len(files),
            "total_size": sum(p.stat().st_size for p in files),
            "sources": len({p.name.split("_", 1)[0] for p in files}),
        }

    @staticmethod
    def _delete(paths: list[Path]) -> int:
        count = 0
        for path in paths:
            # A concurrent clear may have got there first
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            count += 1
        return count
