"""Process-wide logging setup for the reservation engine and its collaborators."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from travel_reservations.utils.config import get_settings


DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured_level: Optional[str] = None


def configure_logging(level: Optional[str] = None) -> str:
    """Install the stdout handler once and return the effective level.

    Later calls are no-ops, so modules can call this at import time
    without stacking handlers.
    """

    global _configured_level
    if _configured_level is not None:
        return _configured_level

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()
    logging.basicConfig(
        level=resolved_level,
        format=settings.log_format or DEFAULT_LOG_FORMAT,
        stream=sys.stdout,
    )
    _configured_level = resolved_level
    return resolved_level


def get_logger(name: str) -> logging.Logger:
    """Return a logger for ``name`` after making sure logging is configured."""
    configure_logging()
    return logging.getLogger(name)
