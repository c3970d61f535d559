"""Logging setup for CLI and HTTP entry points."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any, TextIO

from .redaction import sanitize_text

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per line; message and traceback are redacted.

    ``extra={"provider": ...}`` and ``extra={"query": ...}`` are carried
    through as top-level fields.
    """

    extra_fields = ("provider", "query")

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in self.extra_fields:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = sanitize_text(str(value))
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def resolve_level(level: int | str) -> int:
    """Accept a numeric level or a name such as ``"debug"``."""
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}.")
    return logging.getLevelNamesMapping()[name]


def setup_logger(
    name: str = "weather_dashboard",
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Create or reconfigure the process-wide logger.

    Repeat calls only change the level, so entry points can call once at
    startup and again after settings load. ``stream`` defaults to stderr,
    which keeps CLI table output on stdout clean.
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
