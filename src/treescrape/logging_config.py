"""Logging setup for the treescrape package logger."""

import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "treescrape"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return numeric_level


def _make_handler(handler: logging.Handler, level: int, format_string: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    return handler


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Configure the ``treescrape`` logger.

    Records go to stderr so that profile output on stdout stays parseable,
    and additionally to ``log_file`` when given. Handlers are only installed
    once unless ``force`` is set; the level is always updated.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_file: Optional file path for logging output
        format_string: Optional custom format string for log messages
        force: If True, replace existing handlers

    Returns:
        Configured logger instance

    Raises:
        ValueError: If the level name is unknown
    """
    numeric_level = _resolve_level(level)
    format_string = format_string or DEFAULT_FORMAT

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    if force or not logger.handlers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        logger.addHandler(_make_handler(logging.StreamHandler(sys.stderr), numeric_level, format_string))
        if log_file:
            logger.addHandler(_make_handler(logging.FileHandler(log_file), numeric_level, format_string))
    else:
        for handler in logger.handlers:
            handler.setLevel(numeric_level)

    # Avoid duplicate records through the root logger
    logger.propagate = False

    return logger
