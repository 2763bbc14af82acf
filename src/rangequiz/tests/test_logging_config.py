"""Tests for logging configuration."""
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from unittest.mock import patch

import pytest

from rangequiz.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def test_setup_logging_console_only():
    """Test that a single stdout handler is installed."""
    with patch("rangequiz.logging_config.settings.logging.dir", None):
        setup_logging("Starting", "DEBUG")

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert logging.getLogger("telegram").level == logging.WARNING


def test_setup_logging_with_file(tmp_path: Path):
    """Test that a rotating file handler is added when LOG_DIR is set."""
    with patch("rangequiz.logging_config.settings.logging.dir", str(tmp_path)):
        setup_logging("Starting", logging.INFO)

    handlers = logging.getLogger().handlers
    assert any(isinstance(handler, TimedRotatingFileHandler) for handler in handlers)
    assert (tmp_path / "rangequiz.log").exists()
