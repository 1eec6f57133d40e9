"""
Tests for structured logging helpers.
"""

import importlib.util
import json
import logging
from pathlib import Path

import pytest

from estate.shared.infrastructure.logging import CustomJsonFormatter, redact_value


ENTRY_MODULE = Path(__file__).resolve().parent.parent / "api" / "index.py"


def format_record(formatter: CustomJsonFormatter, **extra) -> dict:
    record = logging.makeLogRecord({
        "name": "estate.test",
        "levelno": logging.INFO,
        "levelname": "INFO",
        "msg": "Database connection established",
        **extra,
    })
    return json.loads(formatter.format(record))


class TestRedaction:

    def test_sensitive_keys_masked(self):
        assert redact_value("db_password", "hunter2") == "***REDACTED***"
        assert redact_value("access_token", "abc") == "***REDACTED***"
        assert redact_value("tokens_used", "12") == "12"

    def test_url_credentials_masked(self):
        assert redact_value("database", "postgresql+asyncpg://estate:hunter2@db:5432/estate") == \
            "postgresql+asyncpg://estate:***@db:5432/estate"

    def test_non_strings_untouched(self):
        assert redact_value("password", 42) == 42


class TestCustomJsonFormatter:

    def test_adds_context_fields(self):
        formatter = CustomJsonFormatter("%(name)s %(levelname)s %(message)s", environment="test")

        payload = format_record(formatter, correlation_id="abc-123")

        assert payload["message"] == "Database connection established"
        assert payload["correlation_id"] == "abc-123"
        assert payload["environment"] == "test"
        assert "timestamp" in payload

    def test_redacts_extra_fields(self):
        formatter = CustomJsonFormatter("%(message)s")

        payload = format_record(formatter, database="postgresql://u:secret@db/estate", api_key="k")

        assert payload["database"] == "postgresql://u:***@db/estate"
        assert payload["api_key"] == "***REDACTED***"


class TestServerlessEntry:
    """The serverless handler runs without a lifespan, so the entry module configures logging."""

    @pytest.fixture
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield root
        root.handlers[:] = handlers
        root.setLevel(level)

    def load_entry_module(self):
        location = importlib.util.spec_from_file_location("estate_serverless_entry", ENTRY_MODULE)
        module = importlib.util.module_from_spec(location)
        location.loader.exec_module(module)
        return module

    def test_entry_module_installs_json_logging(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.setenv("LOG_LEVEL", "warning")

        module = self.load_entry_module()

        try:
            assert module.app.state.environment == "staging"
            assert restore_root_logger.level == logging.WARNING
            formatters = [handler.formatter for handler in restore_root_logger.handlers]
            assert any(isinstance(formatter, CustomJsonFormatter) for formatter in formatters)
            assert module.handler is not None
        finally:
            module.app.state.environment = "test"

    def test_entry_module_tolerates_malformed_settings(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("DB_POOL_SIZE", "five")
        monkeypatch.setenv("LOG_LEVEL", "")

        module = self.load_entry_module()

        assert module.app.state.environment == "test"
        assert restore_root_logger.level == logging.INFO
