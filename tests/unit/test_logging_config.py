"""
Unit tests for tablediff.utils.logging

Covers JSON and console formatting, the context logger and
environment-based configuration.
"""

import json
import logging
import sys
from unittest.mock import patch

from tablediff.utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    configure_from_env,
    get_logger,
    setup_logging,
)


def _record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="/path/to/test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_init_with_defaults(self):
        """Test initialization with default parameters"""
        # Arrange & Act
        formatter = JSONFormatter()

        # Assert
        assert formatter.include_timestamp is True
        assert formatter.include_hostname is True
        assert formatter.app_name == "tablediff"
        assert formatter.hostname is not None

    def test_init_with_custom_values(self):
        """Test initialization with custom parameters"""
        # Arrange & Act
        formatter = JSONFormatter(include_timestamp=False, include_hostname=False, app_name="test-app")

        # Assert
        assert formatter.include_timestamp is False
        assert formatter.include_hostname is False
        assert formatter.app_name == "test-app"
        assert formatter.hostname is None

    def test_format_basic_log_record(self):
        """Test formatting a basic log record"""
        # Arrange
        formatter = JSONFormatter()

        # Act
        data = json.loads(formatter.format(_record()))

        # Assert
        assert data["level"] == "INFO"
        assert data["logger"] == "test_logger"
        assert data["message"] == "Test message"
        assert data["app"] == "tablediff"
        assert "timestamp" in data
        assert "hostname" in data
        assert data["source"]["file"] == "/path/to/test.py"
        assert data["source"]["line"] == 42

    def test_format_without_timestamp_and_hostname(self):
        """Test formatting without optional fields"""
        # Arrange
        formatter = JSONFormatter(include_timestamp=False, include_hostname=False)

        # Act
        data = json.loads(formatter.format(_record()))

        # Assert
        assert "timestamp" not in data
        assert "hostname" not in data

    def test_format_with_exception_info(self):
        """Test formatting with exception information"""
        # Arrange
        formatter = JSONFormatter()
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        # Act
        data = json.loads(formatter.format(_record("Error occurred", logging.ERROR, exc_info)))

        # Assert
        assert data["exception"]["type"] == "ValueError"
        assert "Test error" in data["exception"]["message"]
        assert isinstance(data["exception"]["traceback"], list)

    def test_format_with_extra_context(self):
        """Test formatting with extra context fields"""
        # Arrange
        formatter = JSONFormatter()
        record = _record("Chunk committed")
        record.diff_id = "run-1"
        record.chunk_index = 3

        # Act
        data = json.loads(formatter.format(record))

        # Assert
        assert data["context"] == {"diff_id": "run-1", "chunk_index": 3}

    def test_format_without_extra_has_no_context(self):
        """Test that internal logging fields are not reported as context"""
        # Arrange
        formatter = JSONFormatter()

        # Act
        data = json.loads(formatter.format(_record()))

        # Assert
        assert "context" not in data

    def test_format_non_serializable_extra(self):
        """Test that non-JSON values are stringified"""
        # Arrange
        formatter = JSONFormatter()
        record = _record()
        record.columns = frozenset({"id"})

        # Act
        data = json.loads(formatter.format(record))

        # Assert
        assert data["context"]["columns"] == "frozenset({'id'})"


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_colors_disabled_without_tty(self):
        """Test that colors are only used on a terminal"""
        # Arrange & Act
        with patch.object(sys.stderr, "isatty", return_value=False):
            formatter = ConsoleFormatter(use_colors=True)

        # Assert
        assert formatter.use_colors is False

    def test_format_with_colors(self):
        """Test that level names are colored and restored"""
        # Arrange
        with patch.object(sys.stderr, "isatty", return_value=True):
            formatter = ConsoleFormatter(use_colors=True)
        record = _record(level=logging.WARNING)

        # Act
        result = formatter.format(record)

        # Assert
        assert "\033[33mWARNING\033[0m" in result
        assert record.levelname == "WARNING"

    def test_format_plain(self):
        """Test plain formatting includes logger name and message"""
        # Arrange
        formatter = ConsoleFormatter(use_colors=False)

        # Act
        result = formatter.format(_record())

        # Assert
        assert "[INFO] test_logger: Test message" in result

    def test_format_appends_extra_fields(self):
        """Test extra fields are appended in brackets"""
        # Arrange
        formatter = ConsoleFormatter(use_colors=False)
        record = _record()
        record.diff_id = "run-1"

        # Act
        result = formatter.format(record)

        # Assert
        assert result.endswith("[diff_id=run-1]")


class TestContextLogger:
    """Test ContextLogger class"""

    def test_context_added_to_records(self, caplog):
        """Test bound context and call kwargs reach the record"""
        # Arrange
        logger = ContextLogger("tablediff.test", diff_id="run-1")

        # Act
        with caplog.at_level(logging.INFO, logger="tablediff.test"):
            logger.info("Chunk committed", chunk_index=2)

        # Assert
        record = caplog.records[-1]
        assert record.diff_id == "run-1"
        assert record.chunk_index == 2
        assert record.getMessage() == "Chunk committed"

    def test_bind_adds_context(self):
        """Test bind() returns a child with merged context"""
        # Arrange
        logger = ContextLogger("tablediff.test", diff_id="run-1")

        # Act
        child = logger.bind(mode="primary-key")
        context = child.get_context()
        context["diff_id"] = "changed"

        # Assert
        assert child.get_context() == {"diff_id": "run-1", "mode": "primary-key"}
        assert logger.get_context() == {"diff_id": "run-1"}
        assert child.logger is logger.logger

    def test_explicit_extra_is_merged(self, caplog):
        """Test an explicit extra mapping is merged with bound context"""
        # Arrange
        logger = ContextLogger("tablediff.test", diff_id="run-1")

        # Act
        with caplog.at_level(logging.INFO, logger="tablediff.test"):
            logger.info("Loaded", extra={"rows": 10})

        # Assert
        assert caplog.records[-1].rows == 10
        assert caplog.records[-1].diff_id == "run-1"

    def test_error_with_exc_info(self, caplog):
        """Test exception info is passed through"""
        # Arrange
        logger = ContextLogger("tablediff.test")

        # Act
        with caplog.at_level(logging.ERROR, logger="tablediff.test"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.error("Failed", exc_info=True)

        # Assert
        assert caplog.records[-1].exc_info is not None


class TestSetupLogging:
    """Test setup_logging and configure_from_env"""

    def test_console_handler_installed(self, restore_root_logger):
        """Test a single console handler at the requested level"""
        # Act
        setup_logging(level="DEBUG")

        # Assert
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)

    def test_json_console(self, restore_root_logger):
        """Test JSON formatting on the console handler"""
        # Act
        setup_logging(json_format=True)

        # Assert
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_file_handler_writes(self, restore_root_logger, tmp_path):
        """Test a rotating file handler is created with its directory"""
        # Arrange
        log_file = tmp_path / "logs" / "tablediff.log"

        # Act
        setup_logging(level="INFO", log_file=str(log_file), console_output=False, json_format=True)
        logging.getLogger("tablediff.test").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Assert
        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert any(json.loads(line)["message"] == "written" for line in lines)
        for handler in logging.getLogger().handlers:
            handler.close()

    def test_invalid_level_defaults_to_info(self, restore_root_logger):
        """Test unknown level names fall back to INFO"""
        # Act
        setup_logging(level="LOUD")

        # Assert
        assert logging.getLogger().level == logging.INFO

    def test_configure_from_env(self, restore_root_logger, monkeypatch):
        """Test environment variables drive configuration"""
        # Arrange
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("LOG_JSON", "true")

        # Act
        configure_from_env()

        # Assert
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_get_logger(self):
        """Test get_logger returns the named stdlib logger"""
        assert get_logger("tablediff.x") is logging.getLogger("tablediff.x")
