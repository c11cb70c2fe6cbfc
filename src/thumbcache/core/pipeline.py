"""Thumbnail pipeline.

A ThumbCreator is bound to one source image and collects transformation
calls (crop, fit, resize, resize_canvas) in order. Every call validates
its arguments, resolves defaults, and records one operation; no file is
opened until save(). save() hands the recorded chain to the cache
resolver, then clears it so the same instance can build another
thumbnail of the same source.

    thumb = ThumbCreator("photos/cat.jpg").crop(600).resize(200).save()
"""

from enum import Enum
from pathlib import Path
from typing import Any

from PIL import ImageColor

from thumbcache.core import filesystem
from thumbcache.core.operations import Crop, Fit, Operation, Resize, ResizeCanvas
from thumbcache.core.resolver import CacheResolver, get_default_resolver
from thumbcache.errors import InvalidArgumentError, NoOperationsError, NotReadableError
from thumbcache.imaging.geometry import ANCHORS


class PipelineState(Enum):
    """Where a pipeline is in its build/save cycle."""

    BUILDING = "building"  # collecting operations
    RESOLVED = "resolved"  # last save() succeeded, nothing pending


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_width(width: Any, method: str) -> int:
    if not _is_int(width) or width <= 0:
        raise InvalidArgumentError(f"You have to set at least the width for the `{method}()` method")
    return width


def _check_height(height: Any, method: str) -> int:
    if not _is_int(height) or height < 0:
        raise InvalidArgumentError(f"The height for the `{method}()` method must be a positive integer")
    return height


def _check_anchor(anchor: Any, option: str) -> str:
    if anchor not in ANCHORS:
        raise InvalidArgumentError(f"The `{option}` option must be one of: {', '.join(ANCHORS)}")
    return anchor


class ThumbCreator:
    """Builds a thumbnail of one source image.

    Transformation methods return the instance so calls chain; the order
    of the calls is the order the operations run in and is part of the
    thumbnail's cache key.

    Not safe for concurrent use: share an instance between threads only
    with external locking.
    """

    def __init__(self, path: str | Path, resolver: CacheResolver | None = None):
        """
        Args:
            path: Source image. An absolute path, a path relative to the
                resolver's source directory, or an http(s) url.
            resolver: Cache resolver to save through. Defaults to the
                process-wide resolver built from the user config.

        Raises:
            NotReadableError: A local source is missing or unreadable.
        """
        self._resolver = resolver or get_default_resolver()

        path = str(path)
        if not filesystem.is_url(path):
            path = filesystem.make_absolute(path, self._resolver.source_dir)
            if not filesystem.is_readable(path):
                raise NotReadableError(f"File or directory `{filesystem.rtr(path)}` is not readable")

        self._path = path
        self._operations: list[Operation] = []
        self._state = PipelineState.BUILDING
        self._target: str | None = None

    def __repr__(self) -> str:
        return f"ThumbCreator({self._path!r}, pending={len(self._operations)})"

    @property
    def path(self) -> str:
        """Source image path or url."""
        return self._path

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def operations(self) -> tuple[Operation, ...]:
        """Pending operations, in call order."""
        return tuple(self._operations)

    @property
    def history(self) -> list[tuple[str, dict[str, Any]]]:
        """Pending calls as (method name, resolved parameters) records."""
        return [(op.kind.value, op.params()) for op in self._operations]

    @property
    def target(self) -> str | None:
        """Path returned by the last successful save(), if any."""
        return self._target

    def _add(self, operation: Operation) -> "ThumbCreator":
        self._operations.append(operation)
        self._state = PipelineState.BUILDING
        return self

    def crop(self, width: int = 0, height: int = 0, x: int = 0, y: int = 0) -> "ThumbCreator":
        """Cut out a rectangular part of the image.

        Args:
            width: Required width.
            height: Required height. Defaults to the width.
            x: Left edge of the cutout.
            y: Top edge of the cutout.
        """
        width = _check_width(width or 0, "crop")
        height = _check_height(height or 0, "crop") or width
        if not _is_int(x):
            raise InvalidArgumentError("The `x` option must be an integer")
        if not _is_int(y):
            raise InvalidArgumentError("The `y` option must be an integer")

        return self._add(Crop(width, height, x, y))

    def fit(
        self, width: int = 0, height: int = 0, position: str = "center", upsize: bool = True
    ) -> "ThumbCreator":
        """Crop to the best matching aspect ratio, then resize to width x height.

        Args:
            width: Required width. Defaults to the height.
            height: Required height. Defaults to the width.
            position: Which part of the image to keep when cropping.
            upsize: Never enlarge past the source's own dimensions.
        """
        height = _check_height(height or 0, "fit")
        width = _check_width(width or height, "fit")
        height = height or width
        position = _check_anchor(position, "position")

        return self._add(Fit(width, height, bool(upsize), position))

    def resize(
        self, width: int | None = 0, height: int = 0, aspect_ratio: bool = True, upsize: bool = True
    ) -> "ThumbCreator":
        """Resize the image.

        Without a width the height alone drives the resize.

        Args:
            width: Required width.
            height: Required height. Defaults to the width.
            aspect_ratio: Keep the source's proportions; the result fits
                inside width x height.
            upsize: Never enlarge past the source's own dimensions.
        """
        width, height = self._dimensions(width, height, "resize")
        return self._add(Resize(width, height, bool(aspect_ratio), bool(upsize)))

    def resize_canvas(
        self,
        width: int | None = 0,
        height: int = 0,
        anchor: str = "center",
        relative: bool = False,
        bgcolor: str = "#ffffff",
    ) -> "ThumbCreator":
        """Resize the boundaries of the image without scaling its content.

        Args:
            width: Required width. Without it the source width is kept.
            height: Required height. Defaults to the width.
            anchor: Point of the image that stays fixed.
            relative: Add width and height to the current dimensions.
            bgcolor: Color of any new area.
        """
        width, height = self._dimensions(width, height, "resizeCanvas")
        anchor = _check_anchor(anchor, "anchor")
        try:
            ImageColor.getrgb(bgcolor)
        except (ValueError, AttributeError, TypeError):
            raise InvalidArgumentError(f"The `bgcolor` option is not a valid color: {bgcolor!r}") from None

        return self._add(ResizeCanvas(width, height, anchor, bool(relative), bgcolor))

    @staticmethod
    def _dimensions(width: int | None, height: int, method: str) -> tuple[int | None, int]:
        # A missing width is allowed when the height is given
        height = _check_height(height or 0, method)
        if not width and height:
            return None, height
        width = _check_width(width or 0, method)
        return width, height or width

    def save(
        self,
        format: str | None = None,
        quality: int | None = None,
        target: str | Path | None = None,
    ) -> str:
        """Render (or reuse) the thumbnail and return its absolute path.

        Args:
            format: Output format. Defaults to the source's extension.
            quality: Encoding quality, 1-100. Defaults to the configured 90.
            target: Explicit output path, absolute or relative to the
                target directory. Its extension sets the format.

        Raises:
            NoOperationsError: No transformation was requested.
            InvalidArgumentError: Bad quality or output format.
            NotReadableImageError: The source cannot be decoded.
            UnsupportedImageTypeError: The source type is not supported.
            NotWritableError: The thumbnail cannot be written.
        """
        if not self._operations:
            raise NoOperationsError()

        path = self._resolver.resolve(
            self._path, tuple(self._operations), format=format, quality=quality, target=target
        )

        self._operations = []
        self._state = PipelineState.RESOLVED
        self._target = path
        return path
