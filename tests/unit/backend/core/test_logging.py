"""
Unit Tests for Centralized Logging.

Tests the logging configuration, sensitive field masking, and source handling.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest

from microdoc.backend.core import logging as logging_module
from microdoc.backend.core.logging import (
    VALID_SOURCES,
    get_logger,
    log_with_source,
    mask_sensitive_fields,
    setup_logging,
)


@pytest.fixture
def mock_logging_config():
    return {
        "level": "INFO",
        "format": "json",
        "handlers": {
            "console": {"enabled": True},
            "file": {
                "enabled": True,
                "path": "logs/system.jsonl",
                "max_bytes": 10485760,
                "backup_count": 5,
            },
        },
    }


class TestValidSources:
    """Tests for VALID_SOURCES constant."""

    def test_valid_sources_contains_expected_values(self):
        assert VALID_SOURCES == frozenset({"web", "cli", "api", "internal", "unknown"})


class TestLoggingConfigLoading:
    """Tests for logging configuration loading from YAML."""

    def test_reads_yaml_file_once(self, mock_logging_config):
        """Should load logging.yaml and cache the result."""
        logging_module._logging_config = None

        with patch(
            "microdoc.backend.core.logging.load_yaml_config",
            return_value=mock_logging_config,
        ) as mock_load:
            first = logging_module._load_logging_config()
            second = logging_module._load_logging_config()

        assert first is second
        assert first["handlers"]["file"]["backup_count"] == 5
        mock_load.assert_called_once_with("logging.yaml")

        logging_module._logging_config = None

    def test_raises_if_file_missing(self):
        logging_module._logging_config = None

        with patch(
            "microdoc.backend.core.logging.load_yaml_config",
            side_effect=FileNotFoundError("Configuration file not found: logging.yaml"),
        ):
            with pytest.raises(FileNotFoundError, match="logging.yaml"):
                logging_module._load_logging_config()

        logging_module._logging_config = None


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_configures_root_logger_level(self, mock_logging_config):
        with patch("microdoc.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", format_type="json", enable_file_logging=False)

        assert logging.getLogger().level == logging.DEBUG

    def test_uses_config_defaults(self, mock_logging_config):
        with patch("microdoc.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(enable_file_logging=False)

        assert logging.getLogger().level == logging.INFO

    def test_console_handler_only(self, mock_logging_config):
        with patch("microdoc.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(format_type="console", enable_file_logging=False)

        handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
        assert handler_types == ["StreamHandler"]

    def test_file_handler_enabled(self, tmp_path, mock_logging_config):
        """Should add a RotatingFileHandler writing JSONL."""
        log_file = tmp_path / "logs" / "system.jsonl"

        with patch("microdoc.backend.core.logging._load_logging_config", return_value=mock_logging_config), \
             patch("microdoc.backend.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(level="INFO", format_type="json", enable_file_logging=True)

        root_logger = logging.getLogger()
        handler_types = [type(h).__name__ for h in root_logger.handlers]
        assert "RotatingFileHandler" in handler_types
        assert log_file.parent.is_dir()

        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)


class TestMaskSensitiveFields:
    """Tests for the masking processor."""

    def test_masks_top_level_keys(self):
        event = {"event": "x", "password": "hunter2", "slug": "note"}

        result = mask_sensitive_fields(None, "info", event)

        assert result["password"] == "***"
        assert result["slug"] == "note"

    def test_masks_inside_extra(self):
        event = {"event": "x", "extra": {"credential_digest": "$2b$...", "slug": "note"}}

        result = mask_sensitive_fields(None, "info", event)

        assert result["extra"] == {"credential_digest": "***", "slug": "note"}

    def test_leaves_none_values(self):
        event = {"event": "x", "secret": None}

        assert mask_sensitive_fields(None, "info", event)["secret"] is None


class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_structlog_logger(self):
        logger = get_logger("test.module")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_adds_source_field(self):
        logger = get_logger("test")
        mock_info = MagicMock()

        with patch.object(logger, "info", mock_info):
            log_with_source(logger, "cli", "info", "Test message", extra_field="value")

        mock_info.assert_called_once_with("Test message", source="cli", extra_field="value")

    def test_raises_on_invalid_level(self):
        logger = get_logger("test")

        with pytest.raises(AttributeError):
            log_with_source(logger, "web", "nonexistent_level", "Test")
