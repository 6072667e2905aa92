"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from obp.utils.config import get_settings


ROOT_LOGGER_NAME = "obp"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Attach one stdout handler to the ``obp`` logger tree.

    The engine is embedded in host services, so the root logger is left alone
    and records still propagate to whatever the host configured.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    engine_logger = logging.getLogger(ROOT_LOGGER_NAME)
    engine_logger.setLevel(resolved_level)
    if not engine_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        engine_logger.addHandler(handler)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``obp`` namespace for the requested module."""
    configure_logging()
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
