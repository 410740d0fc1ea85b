"""Logging setup for newsdash."""

import logging
import os
from typing import Optional

from rich.logging import RichHandler

LOG_LEVEL_ENV = "NEWSDASH_LOG_LEVEL"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Send newsdash log records to the console through rich."""
    level = level or os.environ.get(LOG_LEVEL_ENV, "WARNING")

    logger = logging.getLogger("newsdash")
    logger.setLevel(_level_from_string(level))
    logger.handlers = []
    logger.propagate = False

    handler = RichHandler(rich_tracebacks=True, show_time=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
