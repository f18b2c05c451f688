"""Logging configuration helpers."""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any

from .config import LoggingSettings

# HTTP client loggers are chatty at INFO; they only follow the root at DEBUG.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


class JsonLineFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _formatter(structured: bool) -> dict[str, Any]:
    """Return the dictConfig formatter fragment for the chosen style."""
    if structured:
        return {"()": JsonLineFormatter}
    return {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}


def configure_logging(settings: LoggingSettings) -> None:
    """Configure application logging according to provided settings."""
    level = settings.level.upper()
    transport_level = level if level == "DEBUG" else "WARNING"

    dict_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": _formatter(settings.structured)},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
            },
        },
        "loggers": {
            name: {"level": transport_level} for name in _TRANSPORT_LOGGERS
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }

    logging.config.dictConfig(dict_config)


__all__ = ["JsonLineFormatter", "configure_logging"]
