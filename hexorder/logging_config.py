"""Logging setup for hexorder.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are attached by whoever embeds the engine, usually through
``setup_logging``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from . import config

__all__ = [
    "DEFAULT_FORMAT",
    "COMPACT_FORMAT",
    "get_logger",
    "setup_logging",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
COMPACT_FORMAT = "%(name)s - %(levelname)s - %(message)s"


def setup_logging(
    name: str = "hexorder",
    level: int | str | None = None,
    log_file: str | Path | None = None,
    console: bool = True,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Configure and return a logger.

    Calling this twice for the same name does not add duplicate handlers.

    Args:
        name: Logger name
        level: Level as int or name; defaults to ``HEXORDER_LOG_LEVEL``
        log_file: Optional file to append records to
        console: Attach a stderr handler
        fmt: Record format string

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    if level is None:
        level = config.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    formatter = logging.Formatter(fmt)

    if console and not any(
        type(h) is logging.StreamHandler for h in logger.handlers
    ):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        already_attached = any(
            isinstance(h, logging.FileHandler)
            and h.baseFilename == os.path.abspath(log_path)
            for h in logger.handlers
        )
        if not already_attached:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger in the hexorder namespace."""
    if name == "hexorder" or name.startswith("hexorder."):
        return logging.getLogger(name)
    return logging.getLogger(f"hexorder.{name}")
