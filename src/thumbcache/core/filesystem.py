"""Filesystem helpers used by the pipeline and the cache resolver."""

import os
import tempfile
from pathlib import Path
from urllib.parse import urlparse

from loguru import logger

_URL_SCHEMES = {"http", "https"}


def is_url(path: str) -> bool:
    """Check if the string is a remote http(s) url."""
    parsed = urlparse(str(path))
    return parsed.scheme in _URL_SCHEMES and bool(parsed.netloc)


def exists(path: str | Path) -> bool:
    return Path(path).exists()


def is_readable(path: str | Path) -> bool:
    """True for an existing regular file the process may read."""
    path = Path(path)
    return path.is_file() and os.access(path, os.R_OK)


def make_absolute(path: str | Path, base_dir: str | Path) -> str:
    """Return `path` unchanged if absolute, else joined onto `base_dir`."""
    path = Path(path)
    if path.is_absolute():
        return str(path)
    return str(Path(base_dir).absolute() / path)


def get_extension(path: str) -> str:
    """Lower-cased extension without the dot. Urls lose their query first."""
    if is_url(path):
        path = urlparse(path).path
    return Path(path).suffix.lstrip(".").lower()


def rtr(path: str | Path, root: str | Path | None = None) -> str:
    """Path relative to `root` (CWD by default), for messages.

    Paths outside the root are returned as given.
    """
    root = Path(root) if root is not None else Path.cwd()
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return str(path)


def atomic_write(path: str | Path, data: bytes):
    """Write `data` to `path` so readers see the old file or the new one, never a partial.

    The bytes go to a temporary file in the target directory which is then
    renamed over the target. The temporary file is removed if anything fails.

    Raises:
        OSError: If the directory cannot be created or the file written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = tempfile.NamedTemporaryFile(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        try:
            os.unlink(tmp.name)
        except FileNotFoundError:
            pass
        raise

    logger.debug(f"Wrote {len(data)} bytes to {path}")
