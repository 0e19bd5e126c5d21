"""Tests for logging setup and cooperative cancellation."""

import logging
import logging.handlers
import time
from pathlib import Path

import pytest
from rich.logging import RichHandler

from smart_organizer.cancellation import CancellationToken
from smart_organizer.config.models import LoggingSettings
from smart_organizer.errors import OperationCancelled
from smart_organizer.logs import configure_logging


def test_configure_logging_installs_rich_and_file_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "organizer.log"

    logger = configure_logging(LoggingSettings(level="debug", file=str(log_file)))
    try:
        assert logger.level == logging.DEBUG
        assert any(isinstance(handler, RichHandler) for handler in logger.handlers)
        file_handlers = [
            handler
            for handler in logger.handlers
            if isinstance(handler, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1

        logging.getLogger("smart_organizer.tests").info("hello from tests")
        file_handlers[0].flush()
        assert "hello from tests" in log_file.read_text(encoding="utf-8")
    finally:
        configure_logging(LoggingSettings())


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(LoggingSettings())
    logger = configure_logging(LoggingSettings(level="ERROR"))

    assert len(logger.handlers) == 1
    assert logger.level == logging.ERROR
    configure_logging(LoggingSettings())


def test_token_cancel_and_raise() -> None:
    token = CancellationToken()
    assert not token.cancelled
    token.raise_if_cancelled("scan")

    token.cancel()

    assert token.cancelled
    with pytest.raises(OperationCancelled) as excinfo:
        token.raise_if_cancelled("hash")
    assert excinfo.value.details == {"stage": "hash"}


def test_token_deadline_expires() -> None:
    token = CancellationToken(timeout_seconds=0.01)

    time.sleep(0.05)

    assert token.cancelled
