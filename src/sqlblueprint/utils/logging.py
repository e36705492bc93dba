"""Logging setup for sqlblueprint: one stderr handler on the package logger."""

import logging
import os
import sys
from typing import Optional, Union

ROOT_LOGGER = "sqlblueprint"
LOG_LEVEL_ENV = "SQLBLUEPRINT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """Accept a level number or name ("debug", "WARNING"); unknown names fall back to default."""
    if level is None:
        return default
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else default


def setup_logging(level: Union[int, str, None] = None, format_string: Optional[str] = None) -> logging.Logger:
    """
    Attach a stderr handler to the ``sqlblueprint`` logger.

    The level comes from ``level``, else SQLBLUEPRINT_LOG_LEVEL, else INFO.
    Calling it again only updates the level and format, so importing the
    package twice never duplicates output.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(parse_level(level if level is not None else os.environ.get(LOG_LEVEL_ENV)))

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handler = next((h for h in logger.handlers if getattr(h, "_sqlblueprint", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler._sqlblueprint = True
        logger.addHandler(handler)
    handler.setFormatter(formatter)

    return logger


def set_log_level(level: Union[int, str]) -> None:
    """Change the package log level at runtime (used by the CLI --log-level option)."""
    logging.getLogger(ROOT_LOGGER).setLevel(parse_level(level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
