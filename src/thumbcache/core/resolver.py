"""Cache resolution for thumbnail pipelines.

Turns a source path plus an ordered list of operations into a file on
disk. The target name is derived from the source and the full operation
history (see thumbcache.core.fingerprint); when that file already exists
nothing is decoded or rendered. Otherwise the source is decoded, every
operation is applied in order, and the encoded result is written
atomically to the target path.
"""

import threading
from collections.abc import Sequence
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from thumbcache.config.manager import ConfigManager
from thumbcache.core import filesystem
from thumbcache.core.fingerprint import SaveRecord, target_name
from thumbcache.core.operations import Operation, apply_operation
from thumbcache.errors import InvalidArgumentError, NoOperationsError, NotWritableError
from thumbcache.imaging.processor import SAVE_FORMATS, PillowProcessor

_FORMAT_ALIASES = {"jpeg": "jpg", "tif": "tiff"}


def normalize_format(fmt: str) -> str:
    """Lower-case, drop a leading dot, and fold jpeg -> jpg and tif -> tiff."""
    fmt = fmt.lower().lstrip(".")
    return _FORMAT_ALIASES.get(fmt, fmt)


@dataclass(frozen=True)
class SaveOptions:
    """Resolved options for one save() call."""

    format: str
    quality: int
    target: str | None = None


class _KeyedLocks:
    """One lock per key, dropped again once nobody holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [lock, users]

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class CacheResolver:
    """Maps operation chains to cached thumbnail files, rendering on a miss."""

    def __init__(
        self,
        target_dir: str | Path,
        processor: PillowProcessor | None = None,
        source_dir: str | Path | None = None,
        default_quality: int = 90,
        lock_renders: bool = True,
    ):
        self._target_dir = Path(target_dir).absolute()
        self._source_dir = Path(source_dir) if source_dir is not None else Path.cwd()
        self._processor = processor or PillowProcessor()
        self._default_quality = default_quality
        self._locks = _KeyedLocks() if lock_renders else None
        self._renders_lock = threading.Lock()
        self.renders = 0  # successful renders, for diagnostics

    @classmethod
    def from_config(cls, config: ConfigManager) -> "CacheResolver":
        """Build a resolver from the `thumbs` config group.

        Raises:
            InvalidArgumentError: The configured driver is not available.
        """
        driver = config.get("thumbs", "driver", PillowProcessor.driver)
        if driver != PillowProcessor.driver:
            raise InvalidArgumentError(
                f"Unsupported image driver: {driver!r}. Available: {PillowProcessor.driver}"
            )
        processor = PillowProcessor(
            fetch_timeout=config.get("thumbs", "fetch_timeout_seconds", 10),
        )
        return cls(
            target_dir=config.target_dir,
            processor=processor,
            source_dir=config.source_dir,
            default_quality=config.get("thumbs", "default_quality", 90),
            lock_renders=config.get("thumbs", "lock_renders", True),
        )

    @property
    def target_dir(self) -> Path:
        return self._target_dir

    @property
    def source_dir(self) -> Path:
        return self._source_dir

    @property
    def processor(self) -> PillowProcessor:
        return self._processor

    @property
    def driver(self) -> str:
        return self._processor.driver

    def save_options(
        self,
        source: str,
        format: str | None = None,
        quality: int | None = None,
        target: str | Path | None = None,
    ) -> SaveOptions:
        """Fill in and validate save options.

        The format defaults to the source's extension. An explicit target
        always takes its format from its own extension.
        """
        if quality is None:
            quality = self._default_quality
        if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
            raise InvalidArgumentError(f"Quality must be an integer between 1 and 100, got {quality!r}")

        if target:
            target = str(target)
            format = filesystem.get_extension(target)
        elif not format:
            format = filesystem.get_extension(source)
        format = normalize_format(format or "")

        if format not in SAVE_FORMATS:
            raise InvalidArgumentError(
                f"Unsupported output format: {format!r}. Allowed: {', '.join(SAVE_FORMATS)}"
            )
        return SaveOptions(format=format, quality=quality, target=target or None)

    def target_path(self, source: str, operations: Sequence[Operation], options: SaveOptions) -> str:
        """Absolute path the thumbnail for this chain lives at."""
        if options.target:
            name = options.target
        else:
            name = target_name(source, operations, SaveRecord(self.driver, options.format, options.quality))
        return filesystem.make_absolute(name, self._target_dir)

    def resolve(
        self,
        source: str,
        operations: Sequence[Operation],
        format: str | None = None,
        quality: int | None = None,
        target: str | Path | None = None,
    ) -> str:
        """Return the path of the thumbnail, rendering it first on a cache miss.

        Raises:
            NoOperationsError: `operations` is empty.
            InvalidArgumentError: Bad quality or output format.
            NotReadableImageError, UnsupportedImageTypeError: The source cannot be decoded.
            NotEncodableError: The result cannot be written in the output format.
            NotWritableError: The thumbnail cannot be written.
        """
        if not operations:
            raise NoOperationsError()

        options = self.save_options(source, format, quality, target)
        path = self.target_path(source, operations, options)

        if filesystem.exists(path):
            logger.debug(f"Thumbnail cache hit: {path}")
            return path

        with self._lock(path):
            # Another thread may have finished the same render while we waited
            if filesystem.exists(path):
                logger.debug(f"Thumbnail rendered concurrently: {path}")
                return path
            data = self.render(source, operations, options.format, options.quality)
            self._persist(path, data)

        logger.info(f"Thumbnail created: {filesystem.rtr(path, self._target_dir)}")
        return path

    def render(self, source: str, operations: Sequence[Operation], format: str, quality: int) -> bytes:
        """Decode `source`, apply `operations` in order and encode the result."""
        logger.debug(f"Rendering {len(operations)} operation(s) on {source}")
        images = [self._processor.decode(source)]
        try:
            for operation in operations:
                image = apply_operation(self._processor, images[-1], operation)
                if image is not images[-1]:
                    images.append(image)
            data = self._processor.encode(images[-1], format, quality)
        finally:
            for image in images:
                image.close()
        with self._renders_lock:
            self.renders += 1
        return data

    def _persist(self, path: str, data: bytes):
        try:
            filesystem.atomic_write(path, data)
        except OSError as e:
            logger.error(f"Unable to write thumbnail {path}: {e}")
            raise NotWritableError(f"Unable to create file `{filesystem.rtr(path)}`", path=path) from e

    def _lock(self, key: str):
        if self._locks is None:
            return nullcontext()
        return self._locks.hold(key)


_default_config: ConfigManager | None = None
_default_resolver: CacheResolver | None = None
_default_lock = threading.Lock()


def _watch(config: ConfigManager):
    def on_change(group: str, key: str, new_value, old_value):
        if group != "thumbs" or config is not _default_config:
            return
        logger.debug(f"thumbs.{key} changed, default resolver will be rebuilt")
        set_default_resolver(None)

    config.add_listener(on_change)


def get_default_config() -> ConfigManager:
    """Get or load the process-wide config the default resolver is built from."""
    global _default_config
    with _default_lock:
        if _default_config is None:
            config = ConfigManager()
            config.load()
            _watch(config)
            _default_config = config
        return _default_config


def set_default_config(config: ConfigManager | None):
    """Replace the process-wide config (None reloads it from disk on next use).

    The default resolver is rebuilt from the new config, and again
    whenever a `thumbs` value of it changes.
    """
    global _default_config, _default_resolver
    if config is not None:
        _watch(config)
    with _default_lock:
        _default_config = config
        _default_resolver = None


def get_default_resolver() -> CacheResolver:
    """Get or create the process-wide resolver built from the default config."""
    global _default_resolver
    with _default_lock:
        if _default_resolver is not None:
            return _default_resolver
    config = get_default_config()
    with _default_lock:
        if _default_resolver is None:
            _default_resolver = CacheResolver.from_config(config)
        return _default_resolver


def set_default_resolver(resolver: CacheResolver | None):
    """Replace the process-wide resolver (None rebuilds it from config on next use)."""
    global _default_resolver
    with _default_lock:
        _default_resolver = resolver
