"""Logging setup for the organizer package."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from smart_organizer.config.models import LoggingSettings

PACKAGE_LOGGER = "smart_organizer"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(
    settings: LoggingSettings | None = None,
    *,
    console: Console | None = None,
) -> logging.Logger:
    """Attach handlers to the package logger according to settings.

    Console output goes through `rich`; a rotating file handler is added when
    `settings.file` is set. Calling this again replaces previous handlers.

    Args:
        settings: Logging settings; defaults are used when omitted.
        console: Optional rich console (stderr by default).

    Returns:
        logging.Logger: The configured package logger.
    """
    settings = settings or LoggingSettings()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(settings.level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logger.addHandler(rich_handler)

    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


__all__ = ["PACKAGE_LOGGER", "configure_logging"]
