"""Assertion helpers for code that produces thumbnails.

Plain functions raising AssertionError, usable from pytest or unittest.
"""

import re
from pathlib import Path

from PIL import Image, ImageChops

from thumbcache.core.pipeline import ThumbCreator
from thumbcache.core.resolver import CacheResolver


def assert_image_size(width: int, height: int, path: str | Path, message: str = ""):
    """Assert the image at `path` is exactly width x height."""
    with Image.open(path) as img:
        actual = img.size
    assert actual == (width, height), (
        f"{message + ': ' if message else ''}expected {width}x{height}, got {actual[0]}x{actual[1]} for {path}"
    )


def assert_thumb_path(path: str | Path, target_dir: str | Path, message: str = ""):
    """Assert `path` is a fingerprint-named thumbnail directly inside `target_dir`."""
    regex = rf"^{re.escape(str(Path(target_dir)))}[\\/][0-9a-f]{{32}}_[0-9a-f]{{32}}\.\w{{3,4}}$"
    assert re.match(regex, str(path)), (
        f"{message + ': ' if message else ''}{path} is not a thumbnail path under {target_dir}"
    )


def assert_image_file_equals(expected: str | Path, actual: str | Path, message: str = ""):
    """Assert two image files decode to the same size, mode and pixels."""
    expected, actual = Path(expected), Path(actual)
    assert expected.exists(), f"{message + ': ' if message else ''}{expected} does not exist"
    assert actual.exists(), f"{message + ': ' if message else ''}{actual} does not exist"

    with Image.open(expected) as a, Image.open(actual) as b:
        assert a.size == b.size and a.mode == b.mode, (
            f"{message + ': ' if message else ''}{a.size} {a.mode} != {b.size} {b.mode}"
        )
        diff = ImageChops.difference(a.convert("RGBA"), b.convert("RGBA"))
        assert diff.getbbox() is None, f"{message + ': ' if message else ''}pixels differ in {diff.getbbox()}"


def create_some_thumbs(resolver: CacheResolver, *sources: str | Path) -> list[str]:
    """Render two resize thumbnails per source and return their paths."""
    paths = []
    for source in sources:
        paths.append(ThumbCreator(source, resolver).resize(200).save())
        paths.append(ThumbCreator(source, resolver).resize(300).save())
    return paths
