"""File logging setup. The terminal belongs to the TUI, so nothing goes to stderr."""

from __future__ import annotations

import logging
from enum import StrEnum
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

from logscout.config import get_log_dir

if TYPE_CHECKING:
    from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class LogLevel(StrEnum):
    """Level names accepted on the command line."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def setup_logging(level: str | int = logging.WARNING, log_dir: Path | None = None) -> Path:
    """Send ``logscout.*`` records to a rotating file and return its path."""
    directory = log_dir or get_log_dir()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "logscout.log"

    handler = RotatingFileHandler(path, maxBytes=1 << 20, backupCount=3, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("logscout")
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return path
