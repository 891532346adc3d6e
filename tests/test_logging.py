"""
Tests for logging utilities.
"""

import json
import logging
from unittest.mock import patch

import pytest

from caucion_alert.utils import logging as logging_utils
from caucion_alert.utils.logging import (
    PIPELINE_COMPONENTS,
    ROOT_LOGGER_NAME,
    ComponentLogger,
    LoggingManager,
    get_logger,
    get_logging_stats,
    setup_logging,
)


class TestComponentLogger:
    """Test cases for ComponentLogger."""

    def test_component_logger_initialization(self):
        logger = ComponentLogger("rate.scraper", {"key": "value"})

        assert logger.component_name == "rate.scraper"
        assert logger.extra_context == {"key": "value"}
        assert logger.logger.name == "caucion_alert.rate.scraper"

    def test_format_message(self):
        logger = ComponentLogger("notifier", {"context_key": "context_value"})

        formatted = logger._format_message("Test message", {"extra_key": "extra_value"})

        assert formatted["component"] == "notifier"
        assert formatted["message"] == "Test message"
        assert formatted["context_key"] == "context_value"
        assert formatted["extra_key"] == "extra_value"
        assert "timestamp" in formatted

    def test_log_levels(self):
        logger = ComponentLogger("pipeline")

        with patch.object(logger.logger, "log") as mock_log:
            logger.debug("d")
            logger.info("i")
            logger.warning("w")
            logger.error("e")
            logger.critical("c")

        levels = [call.args[0] for call in mock_log.call_args_list]
        assert levels == [
            logging.DEBUG,
            logging.INFO,
            logging.WARNING,
            logging.ERROR,
            logging.CRITICAL,
        ]

    def test_json_payload(self):
        logger = ComponentLogger("notifier")

        with patch.object(logger.logger, "log") as mock_log:
            logger.info("WhatsApp message sent", {"message_sid": "SM1", "entry_count": 2})

        payload = json.loads(mock_log.call_args.args[1])
        assert payload["message"] == "WhatsApp message sent"
        assert payload["message_sid"] == "SM1"
        assert payload["entry_count"] == 2

    def test_non_serializable_extra_is_stringified(self):
        logger = ComponentLogger("pipeline")

        with patch.object(logger.logger, "log") as mock_log:
            logger.info("Scan finished", {"path": object()})

        payload = json.loads(mock_log.call_args.args[1])
        assert payload["path"].startswith("<object object")

    def test_exception_logging(self):
        logger = ComponentLogger("orchestrator")

        with patch.object(logger.logger, "log") as mock_log:
            logger.error("Something failed", exc_info=True)

        payload = json.loads(mock_log.call_args.args[1])
        assert payload["exception"] is True
        assert mock_log.call_args.kwargs["exc_info"] is True


class TestLoggingManager:
    """Test cases for LoggingManager."""

    def test_creates_log_files(self, tmp_path):
        manager = LoggingManager(log_dir=str(tmp_path), log_level="INFO")

        manager.get_component_logger("notifier").info("hello")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        assert (tmp_path / f"{ROOT_LOGGER_NAME}.log").exists()
        assert (tmp_path / "errors.log").exists()
        for component in PIPELINE_COMPONENTS:
            assert (tmp_path / f"{component.replace('.', '_')}.log").exists()

    def test_component_logger_is_cached(self, tmp_path):
        manager = LoggingManager(log_dir=str(tmp_path))

        first = manager.get_component_logger("pipeline")

        assert manager.get_component_logger("pipeline") is first
        assert manager.get_component_logger("pipeline", {"a": 1}) is not first

    def test_set_log_level(self, tmp_path):
        manager = LoggingManager(log_dir=str(tmp_path), log_level="INFO")

        manager.set_log_level("DEBUG")

        root = logging.getLogger(ROOT_LOGGER_NAME)
        assert root.level == logging.DEBUG
        error_handlers = [
            h for h in root.handlers if "errors.log" in str(getattr(h, "baseFilename", ""))
        ]
        assert error_handlers[0].level == logging.ERROR

    def test_get_log_stats(self, tmp_path):
        manager = LoggingManager(log_dir=str(tmp_path), log_level="WARNING")

        stats = manager.get_log_stats()

        assert stats["log_directory"] == str(tmp_path)
        assert stats["log_level"] == "WARNING"
        assert any(f["name"] == "errors.log" for f in stats["log_files"])

    def test_invalid_level(self, tmp_path):
        with pytest.raises(AttributeError):
            LoggingManager(log_dir=str(tmp_path), log_level="LOUD")


class TestGlobalFunctions:
    """Test cases for module-level helpers."""

    def test_setup_logging_and_get_logger(self, tmp_path):
        manager = setup_logging(log_dir=str(tmp_path), log_level="DEBUG")

        logger = get_logger("scheduler")

        assert isinstance(logger, ComponentLogger)
        assert manager.component_loggers
        assert get_logging_stats()["log_directory"] == str(tmp_path)

    def test_stats_without_setup(self):
        with patch.object(logging_utils, "_logging_manager", None):
            assert get_logging_stats() == {"error": "Logging not initialized"}
