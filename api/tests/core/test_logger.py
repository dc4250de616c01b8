"""Unit tests for core.logger module.

Tests the structlog-based logging configuration:
- configure_logging() installs a single stdout handler with a ProcessorFormatter
- LOG_FORMAT=json switches to JSON output
- LOG_LEVEL is honored
- Noisy third-party loggers (uvicorn access, asyncio, Playwright) are quieted
- stdlib extra= fields and bound context vars reach the output
"""

import json
import logging
import os
from unittest.mock import patch

import pytest
import structlog

from core.logger import (
    QUIET_LOGGERS,
    bound_contextvars,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def _clean_root_logger():
    """Save and restore root logger state around each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    structlog.reset_defaults()


def _our_handler() -> logging.Handler:
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    return handlers[0]


@pytest.mark.unit
class TestConfigureLogging:
    def test_adds_stdout_handler(self):
        configure_logging()

        handler = _our_handler()
        assert isinstance(handler, logging.StreamHandler)
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_replaces_existing_handlers(self):
        logging.getLogger().addHandler(logging.NullHandler())

        configure_logging()

        assert not any(
            isinstance(h, logging.NullHandler) for h in logging.getLogger().handlers
        )

    def test_log_level_from_env(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            configure_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_unknown_log_level_defaults_to_info(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}):
            configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_json_format(self):
        with patch.dict(os.environ, {"LOG_FORMAT": "json"}):
            configure_logging()

        record = logging.LogRecord(
            name="test.module",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="certificate.generated",
            args=(),
            exc_info=None,
        )
        parsed = json.loads(_our_handler().format(record))

        assert parsed["event"] == "certificate.generated"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "test.module"
        assert "timestamp" in parsed

    def test_quiets_noisy_loggers(self):
        configure_logging()

        assert "playwright" in QUIET_LOGGERS
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


@pytest.mark.unit
class TestGetLogger:
    def test_supports_key_value_logging(self, capsys):
        with patch.dict(os.environ, {"LOG_FORMAT": "json"}):
            configure_logging()

        get_logger("tests.logger").info("browser.close.failed", error="gone")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        parsed = json.loads(line)
        assert parsed["event"] == "browser.close.failed"
        assert parsed["error"] == "gone"

    def test_bound_context_is_merged(self, capsys):
        with patch.dict(os.environ, {"LOG_FORMAT": "json"}):
            configure_logging()

        with bound_contextvars(certificate_id="123"):
            get_logger("tests.logger").info("certificate.generated")
        get_logger("tests.logger").info("server.stopped")

        first, second = capsys.readouterr().out.strip().splitlines()[-2:]
        assert json.loads(first)["certificate_id"] == "123"
        assert "certificate_id" not in json.loads(second)


@pytest.mark.unit
def test_stdlib_extra_fields_are_rendered(capsys):
    with patch.dict(os.environ, {"LOG_FORMAT": "json"}):
        configure_logging()

    logging.getLogger("main").warning(
        "request.validation_error", extra={"path": "/generate-certificate"}
    )

    parsed = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert parsed["event"] == "request.validation_error"
    assert parsed["path"] == "/generate-certificate"
