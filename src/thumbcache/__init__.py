"""
thumbcache - on-demand image thumbnails with a content-addressed disk cache.

Chain crop/fit/resize/resize_canvas calls on a ThumbCreator and save():
the thumbnail is rendered once, named after its source and the exact
chain that produced it, and reused on every later identical request.
"""

from thumbcache.core.manager import ThumbManager
from thumbcache.core.pipeline import PipelineState, ThumbCreator
from thumbcache.core.resolver import (
    CacheResolver,
    get_default_config,
    get_default_resolver,
    set_default_config,
    set_default_resolver,
)
from thumbcache.errors import (
    InvalidArgumentError,
    NoOperationsError,
    NotEncodableError,
    NotReadableError,
    NotReadableImageError,
    NotWritableError,
    ThumbcacheError,
    UnsupportedImageTypeError,
)
from thumbcache.version import __version__, __version_display__

__all__ = [
    "CacheResolver",
    "InvalidArgumentError",
    "NoOperationsError",
    "NotEncodableError",
    "NotReadableError",
    "NotReadableImageError",
    "NotWritableError",
    "PipelineState",
    "ThumbCreator",
    "ThumbManager",
    "ThumbcacheError",
    "UnsupportedImageTypeError",
    "__version__",
    "__version_display__",
    "get_default_config",
    "get_default_resolver",
    "set_default_config",
    "set_default_resolver",
]
