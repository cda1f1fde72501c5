"""Logging configuration for Beamline."""

import logging
from typing import Optional

from src.beamline.config import LOG_FORMAT, LOG_LEVEL

LOGGER_NAME = "src.beamline"


def setup_logging(
    level: Optional[str] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Set up console logging for the package.

    Calling this again only updates the level; a second handler is never
    added.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        name: Logger name

    Returns:
        Configured logger instance
    """
    if level is None:
        level = LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    console_handler = next(
        (h for h in logger.handlers if getattr(h, "_beamline_console", False)), None
    )
    if console_handler is None:
        console_handler = logging.StreamHandler()
        console_handler._beamline_console = True
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)
    console_handler.setLevel(numeric_level)

    return logger
