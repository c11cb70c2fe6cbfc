"""Tests for the configuration system."""

from pathlib import Path

import pytest

from thumbcache.config.manager import ConfigManager
from thumbcache.config.defaults import DEFAULT_CONFIG
from thumbcache.core.resolver import CacheResolver
from thumbcache.errors import InvalidArgumentError


class TestConfigManager:
    def test_load_defaults(self, config_manager):
        """Config loads with default values."""
        assert config_manager.get("thumbs", "driver") == "pillow"
        assert config_manager.get("thumbs", "default_quality") == 90
        assert config_manager.get("logging", "log_to_file") is False

    def test_set_and_get(self, config_manager):
        """Can set and retrieve values."""
        config_manager.set("thumbs", "default_quality", 75)
        assert config_manager.get("thumbs", "default_quality") == 75

    def test_save_and_reload(self, tmp_config_dir):
        """Config persists across save/load cycles."""
        mgr = ConfigManager(config_dir=tmp_config_dir)
        mgr.load()
        mgr.set("thumbs", "target_dir", "/srv/thumbs")
        mgr.save()

        mgr2 = ConfigManager(config_dir=tmp_config_dir)
        mgr2.load()
        assert mgr2.get("thumbs", "target_dir") == "/srv/thumbs"
        assert mgr2.target_dir == Path("/srv/thumbs")

    def test_broken_file_falls_back_to_defaults(self, tmp_config_dir):
        """An unparseable config file falls back to defaults."""
        (tmp_config_dir / ConfigManager.CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        mgr = ConfigManager(config_dir=tmp_config_dir)
        mgr.load()
        assert mgr.get("thumbs", "driver") == "pillow"

    def test_groups(self, config_manager):
        """All expected groups are present."""
        groups = config_manager.groups()
        assert "thumbs" in groups
        assert "logging" in groups

    def test_group_labels(self, config_manager):
        """Groups have display labels."""
        assert config_manager.get_group_label("thumbs") == "Thumbnails"
        assert "_label" not in config_manager.get_group("thumbs")

    def test_default_target_dir(self, config_manager):
        """An empty target_dir falls back to the user cache dir."""
        assert config_manager.target_dir.name == "thumbs"
        assert config_manager.target_dir.is_absolute()

    def test_listener_called(self, config_manager):
        """Config change listeners are notified."""
        changes = []
        config_manager.add_listener(
            lambda group, key, new, old: changes.append((group, key, new, old))
        )
        config_manager.set("thumbs", "default_quality", 80)
        assert len(changes) == 1
        assert changes[0] == ("thumbs", "default_quality", 80, 90)

    def test_default_config_has_labels(self):
        """Every default config group has a _label."""
        for group, values in DEFAULT_CONFIG.items():
            assert "_label" in values, f"Group '{group}' missing _label"

    def test_resolver_from_config(self, config_manager, tmp_path):
        """A resolver can be built from the thumbs group."""
        config_manager.set("thumbs", "target_dir", str(tmp_path / "out"))
        config_manager.set("thumbs", "source_dir", str(tmp_path / "in"))
        config_manager.set("thumbs", "default_quality", 70)

        resolver = CacheResolver.from_config(config_manager)
        assert resolver.target_dir == tmp_path / "out"
        assert resolver.source_dir == tmp_path / "in"
        assert resolver.driver == "pillow"
        assert resolver.save_options("a.jpg").quality == 70

    def test_unknown_driver_rejected(self, config_manager):
        """A driver other than pillow is refused instead of ignored."""
        config_manager.set("thumbs", "driver", "imagick")
        with pytest.raises(InvalidArgumentError, match="Unsupported image driver"):
            CacheResolver.from_config(config_manager)
