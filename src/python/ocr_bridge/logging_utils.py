"""Logging helpers with color output to stderr."""

from __future__ import annotations

import logging
from typing import Optional

from colorlog import ColoredFormatter

LOGGER_NAME = "ocr_bridge"

_LOGGER: Optional[logging.Logger] = None


def get_logger(level: Optional[str] = None) -> logging.Logger:
    """Return the package logger; stdout stays free for protocol lines."""
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger(LOGGER_NAME)
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                ColoredFormatter(
                    "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s"
                )
            )
            logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
        _LOGGER = logger
    if level:
        name = level.strip().upper()
        if isinstance(logging.getLevelName(name), int):
            _LOGGER.setLevel(name)
        else:
            _LOGGER.setLevel(logging.INFO)
            _LOGGER.warning("Unknown log level %r; using INFO", level)
    return _LOGGER
