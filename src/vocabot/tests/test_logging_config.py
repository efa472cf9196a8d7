"""Tests for logging configuration."""
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from unittest.mock import patch

import pytest

from vocabot.config import settings
from vocabot.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Keep the root logger as pytest configured it."""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def test_setup_logging_console_only() -> None:
    with patch.object(settings.logging, "dir", None):
        setup_logging("Starting tests", level="debug")

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert logging.getLogger("telegram").level == logging.WARNING


def test_setup_logging_with_file(tmp_path: Path) -> None:
    """Test that a log directory adds a rotating file handler."""
    log_dir = tmp_path / "logs"
    with patch.object(settings.logging, "dir", str(log_dir)):
        setup_logging(level=logging.INFO)

    file_handlers = [
        handler for handler in logging.getLogger().handlers
        if isinstance(handler, TimedRotatingFileHandler)
    ]
    assert len(file_handlers) == 1
    assert (log_dir / "vocabot.log").exists()
