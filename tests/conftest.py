"""Shared test fixtures for thumbcache."""

import pytest
from PIL import Image


def _sample_image(mode: str = "RGB") -> Image.Image:
    """400x400 image with gradients and noise, so crops and resizes differ."""
    horizontal = Image.linear_gradient("L").rotate(90).resize((400, 400))
    vertical = Image.linear_gradient("L").resize((400, 400))
    noise = Image.effect_noise((400, 400), 40)
    image = Image.merge("RGB", (horizontal, vertical, noise))
    if mode == "RGBA":
        image.putalpha(Image.linear_gradient("L").resize((400, 400)))
    return image


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Provide a temporary configuration directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def config_manager(tmp_config_dir):
    """Provide a ConfigManager with a temp directory."""
    from thumbcache.config.manager import ConfigManager

    mgr = ConfigManager(config_dir=tmp_config_dir)
    mgr.load()
    return mgr


@pytest.fixture
def examples_dir(tmp_path):
    """Directory with 400x400.jpg and 400x400.png sources."""
    examples = tmp_path / "examples"
    examples.mkdir()
    _sample_image().save(examples / "400x400.jpg", quality=95)
    _sample_image("RGBA").save(examples / "400x400.png")
    return examples


@pytest.fixture
def jpg_source(examples_dir) -> str:
    return str(examples_dir / "400x400.jpg")


@pytest.fixture
def png_source(examples_dir) -> str:
    return str(examples_dir / "400x400.png")


@pytest.fixture
def target_dir(tmp_path):
    return tmp_path / "thumbs"


@pytest.fixture
def resolver(target_dir, examples_dir):
    """Resolver writing to a temp target dir, resolving sources from examples_dir."""
    from thumbcache.core.resolver import CacheResolver

    return CacheResolver(target_dir=target_dir, source_dir=examples_dir)


@pytest.fixture
def thumb_creator(resolver):
    """Factory: thumb_creator() gives a ThumbCreator for 400x400.jpg."""
    from thumbcache.core.pipeline import ThumbCreator

    def factory(path: str = "400x400.jpg"):
        return ThumbCreator(path, resolver)

    return factory
