"""
Unit tests for logging configuration.

Tests cover:
- Loading logging.yaml
- Stderr and JSONL file handlers
- Source field handling
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from ainotes.core import logging as logging_module
from ainotes.core.logging import (
    VALID_SOURCES,
    _resolve_log_path,
    get_logger,
    log_with_source,
    setup_logging,
)


@pytest.fixture
def mock_logging_config() -> dict:
    """A logging configuration with the JSONL file switched off."""
    return {
        "level": "INFO",
        "format": "json",
        "file": {
            "enabled": False,
            "path": "logs/system.jsonl",
            "max_bytes": 1048576,
            "backup_count": 2,
        },
    }


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Leave the root logger as each test found it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    logging_module._load_logging_config.cache_clear()
    yield
    logging_module._load_logging_config.cache_clear()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestLoadLoggingConfig:
    def test_loads_from_yaml(self):
        config = logging_module._load_logging_config()
        assert config["level"] in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        assert config["file"]["path"] == "logs/system.jsonl"

    def test_config_is_cached(self, mock_logging_config):
        with patch("ainotes.core.logging.load_yaml_config", return_value=mock_logging_config) as mock_load:
            first = logging_module._load_logging_config()
            second = logging_module._load_logging_config()

        assert first is second
        mock_load.assert_called_once_with("logging.yaml")


class TestSetupLogging:
    def test_uses_config_defaults(self, mock_logging_config):
        with patch("ainotes.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging()

        assert logging.getLogger().level == logging.INFO

    def test_override_takes_precedence(self, mock_logging_config):
        with patch("ainotes.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", format_type="console")

        assert logging.getLogger().level == logging.DEBUG

    def test_stderr_handler_only_when_file_disabled(self, mock_logging_config):
        with patch("ainotes.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging()

        handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
        assert "StreamHandler" in handler_types
        assert "RotatingFileHandler" not in handler_types

    def test_file_logging_writes_jsonl(self, tmp_path, mock_logging_config):
        log_file = tmp_path / "logs" / "system.jsonl"

        with patch("ainotes.core.logging._load_logging_config", return_value=mock_logging_config), \
             patch("ainotes.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(enable_file_logging=True)
            get_logger("test").warning("Cache unreadable", path="x")

        handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
        assert handler_types == ["StreamHandler", "RotatingFileHandler"]
        [line] = log_file.read_text(encoding="utf-8").splitlines()
        record = json.loads(line)
        assert record["event"] == "Cache unreadable"
        assert record["path"] == "x"

    def test_http_client_loggers_are_quieted(self, mock_logging_config):
        with patch("ainotes.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING


class TestLogWithSource:
    def test_adds_source_field(self):
        logger = get_logger("test")
        mock_info = MagicMock()

        with patch.object(logger, "info", mock_info):
            log_with_source(logger, "sync", "info", "Note promoted", note_id="abc")

        mock_info.assert_called_once_with("Note promoted", source="sync", note_id="abc")

    def test_raises_on_invalid_level(self):
        with pytest.raises(AttributeError):
            log_with_source(get_logger("test"), "sync", "nonexistent_level", "Test")

    def test_sources_used_by_the_package_are_valid(self):
        assert {"cli", "sync", "cache", "remote", "ai"} <= VALID_SOURCES


class TestResolveLogPath:
    def test_relative_to_project_root(self, tmp_path):
        with patch("ainotes.core.logging.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/system.jsonl") == tmp_path / "logs" / "system.jsonl"
