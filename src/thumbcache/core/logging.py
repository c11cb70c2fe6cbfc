"""Logging setup for thumbcache.

All modules log through loguru via `from loguru import logger`. Importing
thumbcache never touches loguru's sinks; a host application that wants
thumbcache's own console/file output calls setup_logging() once.

Usage:
    from thumbcache.core.logging import setup_logging
    setup_logging(config)
"""

import sys
from pathlib import Path

from loguru import logger
from platformdirs import user_log_dir

from thumbcache.config.manager import APP_NAME, ConfigManager


_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

_LOG_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{name}:{function}:{line} | "
    "{message}"
)


def get_log_dir() -> Path:
    """Return the directory where log files are stored."""
    return Path(user_log_dir(APP_NAME, APP_NAME))


def get_current_log_path() -> Path:
    """Return the path to the current (active) log file."""
    return get_log_dir() / "thumbcache.log"


def setup_logging(config: ConfigManager, log_dir: Path | None = None) -> list[int]:
    """Configure loguru sinks from the `logging` config group.

    Returns the ids of the handlers added, so callers (and tests) can
    remove them again with `logger.remove(handler_id)`.
    """
    level = config.get("logging", "log_level", "INFO")
    log_to_file = config.get("logging", "log_to_file", False)
    console_output = config.get("logging", "log_console_output", True)
    retention_days = config.get("logging", "log_retention_days", 30)
    max_size_mb = config.get("logging", "log_max_size_mb", 50)

    logger.remove()
    handler_ids = []

    if console_output:
        handler_ids.append(
            logger.add(
                sys.stderr,
                format=_LOG_FORMAT,
                level=level,
                colorize=True,
            )
        )

    if log_to_file:
        log_dir = log_dir or get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / "thumbcache.log"

        handler_ids.append(
            logger.add(
                str(log_path),
                format=_LOG_FILE_FORMAT,
                level="DEBUG",
                rotation=f"{max_size_mb} MB",
                retention=f"{retention_days} days",
                compression="zip",
                encoding="utf-8",
                enqueue=True,
            )
        )

        logger.info(f"Log file: {log_path}")

    logger.debug(f"Logging initialized (console={level}, file={log_to_file})")
    return handler_ids
