"""Tests for structured logging and billing context."""

import json
import logging
from types import SimpleNamespace

import pytest

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import (
    BillingContext,
    generate_run_id,
    get_billing_run_id,
    get_context_dict,
    get_operator_id,
)
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


def make_record(msg="bill calculated", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="src.tariffs.service", level=level, pathname="service.py", lineno=42,
        msg=msg, args=(), exc_info=None, func="calculate",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_defaults(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.CONSOLE
        assert config.service_name == "apr-billing"

    def test_from_settings(self):
        settings = SimpleNamespace(log_level="debug", log_format="JSON", service_name="apr-x")
        config = LoggingConfig.from_settings(settings)
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.JSON
        assert config.service_name == "apr-x"

    def test_from_settings_falls_back_on_unknown_values(self):
        settings = SimpleNamespace(log_level="loud", log_format="xml", service_name="apr")
        config = LoggingConfig.from_settings(settings)
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.CONSOLE


class TestBillingContext:
    """Tests for contextvar binding."""

    def test_empty_outside_context(self):
        assert get_context_dict() == {}

    def test_binds_and_clears(self):
        with BillingContext(billing_run_id="run-1", operator_id="admin") as ctx:
            assert get_billing_run_id() == "run-1"
            assert get_operator_id() == "admin"
            ctx.bind(period="2025-07")
            assert get_context_dict() == {
                "billing_run_id": "run-1", "operator_id": "admin", "period": "2025-07",
            }
        assert get_context_dict() == {}

    def test_generates_run_id(self):
        with BillingContext() as ctx:
            assert ctx.billing_run_id
            assert get_billing_run_id() == ctx.billing_run_id

    def test_nested_contexts_restore_outer(self):
        with BillingContext(billing_run_id="outer"):
            with BillingContext(billing_run_id="inner"):
                assert get_billing_run_id() == "inner"
            assert get_billing_run_id() == "outer"

    def test_run_ids_unique(self):
        assert generate_run_id() != generate_run_id()

    def test_elapsed(self):
        assert BillingContext().elapsed_ms >= 0


class TestFormatters:
    """Tests for JSON and console formatters."""

    def test_structured_output(self):
        line = StructuredFormatter(service_name="apr-billing").format(make_record())
        entry = json.loads(line)
        assert entry["message"] == "bill calculated"
        assert entry["level"] == "INFO"
        assert entry["service"] == "apr-billing"
        assert entry["function"] == "calculate"
        assert entry["line"] == 42

    def test_structured_includes_context_and_extras(self):
        with BillingContext(billing_run_id="run-9", operator_id="ops"):
            line = StructuredFormatter().format(
                make_record(configuration_id="cfg-1", total_amount=26500.0)
            )
        entry = json.loads(line)
        assert entry["billing_run_id"] == "run-9"
        assert entry["operator_id"] == "ops"
        assert entry["configuration_id"] == "cfg-1"
        assert entry["total_amount"] == 26500.0

    def test_structured_without_caller(self):
        entry = json.loads(StructuredFormatter(include_caller=False).format(make_record()))
        assert "module" not in entry

    def test_structured_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            import sys
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["exception"]["type"] == "ValueError"

    def test_console_output(self):
        with BillingContext(billing_run_id="run-2"):
            line = ConsoleFormatter().format(make_record(level=logging.WARNING))
        assert "WARNING" in line
        assert "bill calculated" in line
        assert "billing_run_id=run-2" in line


class TestConfigureLogging:
    """Tests for root logger setup."""

    def test_json_format(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("APR_LOG_LEVEL", raising=False)
        monkeypatch.delenv("APR_LOG_FORMAT", raising=False)
        configure_logging(LoggingConfig(level=LogLevel.DEBUG, format=LogFormat.JSON))
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_env_overrides(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("APR_LOG_LEVEL", "warning")
        monkeypatch.setenv("APR_LOG_FORMAT", "json")
        configure_logging(LoggingConfig(level=LogLevel.DEBUG, format=LogFormat.CONSOLE))
        root = restore_root_logger
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_invalid_env_ignored(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("APR_LOG_LEVEL", "verbose")
        monkeypatch.delenv("APR_LOG_FORMAT", raising=False)
        configure_logging(LoggingConfig(level=LogLevel.ERROR))
        assert restore_root_logger.level == logging.ERROR
        assert isinstance(restore_root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_get_logger(self):
        assert get_logger("src.tariffs").name == "src.tariffs"
