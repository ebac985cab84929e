"""Logging setup for the CLI."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "%H:%M:%S"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(name: Optional[str]) -> int:
    """Map a level name to a logging level, falling back to INFO."""
    if not name:
        return _LEVELS[LoggingConfig.DEFAULT_LEVEL]
    return _LEVELS.get(name.strip().lower(), logging.INFO)


def configure_logging(
    level: Optional[str] = None, console: Optional[Console] = None
) -> logging.Logger:
    """Configure process-wide logging through a rich handler.

    The handler shares the console used for progress output so that log
    records are printed above a live progress line instead of through it.
    """
    log_level = parse_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        log_time_format=DATE_FORMAT,
    )
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    logger = logging.getLogger("src")
    logger.setLevel(log_level)
    return logger
