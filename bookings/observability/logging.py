"""Structured JSON logging for the reservation service.

Every line carries the service name from settings. Call sites pass their
context through ``log_fields`` so dates land in the output as ISO strings.
Guest names are never logged; callers pass reservation ids and units instead.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import date, datetime, timezone
from typing import Any

from bookings.config import get_settings


def log_fields(**fields: Any) -> dict[str, dict[str, Any]]:
    """Build the ``extra=`` mapping read by JsonFormatter."""
    return {
        "extra_fields": {
            key: value.isoformat() if isinstance(value, date) else value
            for key, value in fields.items()
        }
    }


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service or get_settings().app_name

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            # Context never overwrites the envelope keys above
            log_obj.update(
                {k: v for k, v in extra_fields.items() if k not in log_obj}
            )

        return json.dumps(log_obj, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger configured for JSON output at the configured level."""
    logger = logging.getLogger(name)

    # Only configure if no handlers (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.getLevelName(get_settings().log_level))
        logger.propagate = False

    return logger
