"""Tests for the JSON log formatter and settings."""

from __future__ import annotations

import json
import logging
import sys
from datetime import date

import pytest
from pydantic import ValidationError

from bookings.config import Settings
from bookings.observability.logging import JsonFormatter, get_logger, log_fields


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="bookings.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        payload = json.loads(JsonFormatter().format(_record("booking created")))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "bookings.test"
        assert payload["message"] == "booking created"
        assert "timestamp" in payload
        assert "exception" not in payload

    def test_extra_fields_are_merged(self):
        record = _record(
            "booking rejected",
            extra_fields={"unit": "U1", "reason": "unit already occupied"},
        )
        payload = json.loads(JsonFormatter().format(record))
        assert payload["unit"] == "U1"
        assert payload["reason"] == "unit already occupied"

    def test_exception_is_rendered(self):
        try:
            raise RuntimeError("store down")
        except RuntimeError:
            record = _record("failure")
            record.exc_info = sys.exc_info()
        payload = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: store down" in payload["exception"]

    def test_service_name_is_stamped(self):
        payload = json.loads(JsonFormatter(service="front-desk").format(_record("x")))
        assert payload["service"] == "front-desk"

    def test_context_cannot_overwrite_envelope(self):
        record = _record(
            "booking created", extra_fields={"level": "FAKE", "unit": "U1"}
        )
        payload = json.loads(JsonFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["unit"] == "U1"


def test_log_fields_renders_dates_as_iso():
    extra = log_fields(check_in=date(2024, 3, 1), nights=5, reason=None)
    assert extra == {
        "extra_fields": {"check_in": "2024-03-01", "nights": 5, "reason": None}
    }


def test_get_logger_configures_once():
    logger = get_logger("bookings.test.once")
    again = get_logger("bookings.test.once")
    assert logger is again
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)
    assert logger.propagate is False


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("SEED_DEMO_DATA", raising=False)
        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.seed_demo_data is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("SEED_DEMO_DATA", "true")
        settings = Settings(_env_file=None)
        assert settings.log_level == "DEBUG"
        assert settings.seed_demo_data is True

    def test_accepts_level_aliases_known_to_logging(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warn")
        settings = Settings(_env_file=None)
        assert logging.getLevelName(settings.log_level) == logging.WARNING

    def test_rejects_unknown_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
