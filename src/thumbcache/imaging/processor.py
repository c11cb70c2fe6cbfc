"""Pillow image driver.

Decodes sources (local files or http(s) urls), applies the pixel work
behind each pipeline operation, and encodes the result. All sizing rules
live in thumbcache.imaging.geometry; this module only moves pixels.
"""

import mimetypes
import urllib.request
from io import BytesIO

from loguru import logger
from PIL import Image, ImageColor, UnidentifiedImageError

from thumbcache.core import filesystem
from thumbcache.errors import (
    InvalidArgumentError,
    NotEncodableError,
    NotReadableImageError,
    UnsupportedImageTypeError,
)
from thumbcache.imaging import geometry

_HTTP_HEADERS = {"User-Agent": "thumbcache"}

# Output format (file extension) -> Pillow format name
SAVE_FORMATS = {
    "jpg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
    "tiff": "TIFF",
    "bmp": "BMP",
}

# Modes each output format can store as-is. JPEG and BMP have no alpha.
_SAVE_MODES = {
    "jpg": ("L", "RGB"),
    "png": ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"),
    "gif": ("1", "L", "P", "RGB", "RGBA"),
    "webp": ("RGB", "RGBA"),
    "tiff": ("1", "L", "LA", "I", "I;16", "F", "P", "RGB", "RGBA", "CMYK"),
    "bmp": ("1", "L", "P", "RGB"),
}


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info)


class PillowProcessor:
    """Image codec and processor backed by Pillow."""

    driver = "pillow"

    def __init__(self, fetch_timeout: float = 10):
        self._fetch_timeout = fetch_timeout

    # -------------------------------------------------------------------
    # Decode / encode
    # -------------------------------------------------------------------

    def decode(self, source: str) -> Image.Image:
        """Open and fully load `source`.

        Raises:
            UnsupportedImageTypeError: The data is not a type Pillow can identify.
            NotReadableImageError: The source cannot be read or decoded.
        """
        try:
            if filesystem.is_url(source):
                fp = BytesIO(self._fetch(source))
            else:
                fp = source
            with Image.open(fp) as img:
                img.load()
                image = img.copy()
        except UnidentifiedImageError as e:
            mime_type = mimetypes.guess_type(source)[0]
            logger.error(f"Unsupported image type for {source}: {e}")
            if mime_type:
                message = f"Image type `{mime_type}` is not supported by this driver"
            else:
                message = "Image type not supported by this driver"
            raise UnsupportedImageTypeError(message, mime_type=mime_type) from e
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            logger.error(f"Unable to read image from {source}: {e}")
            raise NotReadableImageError(f"Unable to read image from `{filesystem.rtr(source)}`") from e

        logger.debug(f"Decoded {source}: {image.format or 'image'} {image.width}x{image.height} {image.mode}")
        return image

    def _fetch(self, url: str) -> bytes:
        req = urllib.request.Request(url, headers=_HTTP_HEADERS)
        with urllib.request.urlopen(req, timeout=self._fetch_timeout) as resp:
            return resp.read()

    def encode(self, image: Image.Image, format: str, quality: int = 90) -> bytes:
        """Encode `image` as `format` (a file extension such as "jpg").

        Raises:
            InvalidArgumentError: `format` is not a supported output format.
            NotEncodableError: Pillow cannot write the image as `format`.
        """
        try:
            pil_format = SAVE_FORMATS[format]
        except KeyError:
            raise InvalidArgumentError(f"Unsupported output format: {format!r}") from None

        save_kwargs = {}
        if pil_format in ("JPEG", "WEBP"):
            save_kwargs["quality"] = quality
        if pil_format == "JPEG":
            save_kwargs["optimize"] = True

        output = BytesIO()
        try:
            self._normalize_mode(image, format).save(output, format=pil_format, **save_kwargs)
        except (OSError, ValueError) as e:
            logger.error(f"Unable to encode {image.mode} image as {pil_format}: {e}")
            raise NotEncodableError(f"Unable to encode image as `{format}`", format=format) from e
        return output.getvalue()

    @classmethod
    def _normalize_mode(cls, image: Image.Image, format: str) -> Image.Image:
        """Convert `image` to a mode `format` can store, keeping alpha where possible."""
        modes = _SAVE_MODES[format]
        if image.mode in modes:
            return image
        if _has_alpha(image):
            return image.convert("RGBA") if "RGBA" in modes else cls._flatten(image)
        if Image.getmodebase(image.mode) == "L" and "L" in modes:
            # I, I;16, F and friends: grayscale with a wider range
            return image.convert("L")
        return image.convert("RGB")

    @staticmethod
    def _flatten(image: Image.Image) -> Image.Image:
        """Composite any transparency onto white and return an RGB image."""
        if image.mode == "P":
            image = image.convert("RGBA")
        if image.mode == "LA":
            image = image.convert("RGBA")
        if image.mode == "RGBA":
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            return background
        return image.convert("RGB")

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------

    def crop(self, image: Image.Image, width: int, height: int, x: int = 0, y: int = 0) -> Image.Image:
        """Cut out a width x height rectangle whose top-left corner is (x, y)."""
        return image.crop((x, y, x + width, y + height))

    def fit(
        self,
        image: Image.Image,
        width: int,
        height: int,
        upsize: bool = True,
        position: str = "center",
    ) -> Image.Image:
        """Crop to the target aspect ratio at `position`, then scale to width x height."""
        box = geometry.fit_crop_box(image.size, width, height, position)
        cropped = image.crop(box)
        size = geometry.fit_size(cropped.size, width, height, upsize)
        if size == cropped.size:
            return cropped
        return cropped.resize(size, Image.Resampling.LANCZOS)

    def resize(
        self,
        image: Image.Image,
        width: int | None,
        height: int | None,
        aspect_ratio: bool = True,
        upsize: bool = True,
    ) -> Image.Image:
        size = geometry.resize_size(image.size, width, height, aspect_ratio, upsize)
        if size == image.size:
            return image
        return image.resize(size, Image.Resampling.LANCZOS)

    def resize_canvas(
        self,
        image: Image.Image,
        width: int | None,
        height: int | None,
        anchor: str = "center",
        relative: bool = False,
        bgcolor: str = "#ffffff",
    ) -> Image.Image:
        """Grow or shrink the image boundaries, padding new area with `bgcolor`."""
        size = geometry.canvas_size(image.size, width, height, relative)
        color = ImageColor.getrgb(bgcolor)
        mode = "RGBA" if _has_alpha(image) or len(color) == 4 else image.mode
        if mode not in ("RGB", "RGBA", "L"):
            mode = "RGB"
        if mode == "L":
            color = ImageColor.getcolor(bgcolor, "L")

        canvas = Image.new(mode, size, color)
        offset = geometry.aligned_offset(size, image.size, anchor)
        if image.mode != mode:
            image = image.convert(mode)
        canvas.paste(image, offset)
        return canvas
