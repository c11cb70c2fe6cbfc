"""Exceptions raised by thumbcache.

Validation errors are raised by the call that receives the bad argument.
Read, decode and write errors are only raised by ``ThumbCreator.save()``,
since nothing touches the disk before then.
"""


class ThumbcacheError(Exception):
    """Base class for every thumbcache error."""


class InvalidArgumentError(ThumbcacheError, ValueError):
    """A caller-supplied parameter is not acceptable."""


class NoOperationsError(InvalidArgumentError):
    """``save()`` was called with no pending operation to render."""

    def __init__(self, message: str = "No valid method called before the `save()` method"):
        super().__init__(message)


class NotReadableError(ThumbcacheError):
    """The source file does not exist or cannot be read."""


class NotReadableImageError(NotReadableError):
    """The source could be read but not decoded as an image."""


class UnsupportedImageTypeError(ThumbcacheError):
    """The source is a file type the image driver does not support."""

    def __init__(self, message: str, mime_type: str | None = None):
        self.mime_type = mime_type
        super().__init__(message)


class NotWritableError(ThumbcacheError, OSError):
    """The thumbnail could not be written to its target path."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class NotEncodableError(ThumbcacheError):
    """The rendered image could not be encoded in the output format."""

    def __init__(self, message: str, format: str | None = None):
        self.format = format
        super().__init__(message)
