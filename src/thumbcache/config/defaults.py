"""Default configuration values for thumbcache.

Configuration is organized into groups. Each group carries a display
label so host applications can present it in their own settings UI.
"""

DEFAULT_CONFIG = {
    # --- Thumbnails ---
    "thumbs": {
        "_label": "Thumbnails",
        "target_dir": "",  # empty = <user cache dir>/thumbs
        "source_dir": "",  # base for relative source paths, empty = CWD
        "driver": "pillow",
        "default_quality": 90,
        "fetch_timeout_seconds": 10,  # remote sources only
        "lock_renders": True,  # one render per fingerprint at a time
    },
    # --- Logging ---
    "logging": {
        "_label": "Logging",
        "log_level": "INFO",
        "log_to_file": False,
        "log_console_output": True,
        "log_retention_days": 30,
        "log_max_size_mb": 50,
    },
}
