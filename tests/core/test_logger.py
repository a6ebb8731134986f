"""
Tests for logging configuration.
"""

import logging

import pytest

from odtquill.utils.logger import configure_logging, set_log_level


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Test configure_logging."""

    def test_console_handler(self, restore_root_logger):
        """A single stdout handler is installed at the requested level."""
        configure_logging(level="DEBUG")
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.DEBUG

    def test_file_handler(self, restore_root_logger, temp_dir):
        """A log file adds a rotating file handler and creates its directory."""
        log_file = temp_dir / "logs" / "odtquill.log"
        configure_logging(level="INFO", log_file=str(log_file))
        logging.getLogger("odtquill.test").info("written to file")
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert len(restore_root_logger.handlers) == 2
        assert "written to file" in log_file.read_text()

    def test_invalid_level(self, restore_root_logger):
        """Unknown level names are rejected."""
        with pytest.raises(ValueError):
            configure_logging(level="LOUD")


class TestSetLogLevel:
    """Test set_log_level."""

    def test_updates_handlers(self, restore_root_logger):
        """The root logger and its handlers follow the new level."""
        configure_logging(level="INFO")
        set_log_level("error")
        root = restore_root_logger
        assert root.level == logging.ERROR
        assert all(handler.level == logging.ERROR for handler in root.handlers)

    def test_invalid_level(self, restore_root_logger):
        """Unknown level names are rejected."""
        with pytest.raises(ValueError):
            set_log_level("verbose")
