"""Logging bootstrap for the simsmods command line."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from simsmods.config.models import LoggingSettings

LOGGER_NAME = "simsmods"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_installed: list[logging.Handler] = []


def _resolve_level(settings: LoggingSettings, verbosity: int) -> int:
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    # Each -v flag lowers the threshold by one standard level.
    return max(logging.DEBUG, level - 10 * verbosity)


def configure_logging(settings: LoggingSettings, verbosity: int = 0) -> logging.Logger:
    """Attach console and optional rotating file handlers to the package logger.

    Handlers installed by an earlier call are removed first, so the function can
    run once per CLI invocation without duplicating output.

    Args:
        settings: Logging section of the resolved configuration.
        verbosity: Number of ``-v`` flags given on the command line.

    Returns:
        logging.Logger: The configured ``simsmods`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in _installed:
        logger.removeHandler(handler)
        handler.close()
    _installed.clear()

    level = _resolve_level(settings, verbosity)
    logger.setLevel(level)
    logger.propagate = False

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(level)
    _installed.append(console_handler)

    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.setLevel(level)
        _installed.append(file_handler)

    for handler in _installed:
        logger.addHandler(handler)
    return logger


__all__ = ["FILE_FORMAT", "LOGGER_NAME", "configure_logging"]
