# dailyproxy/logging_conf.py
from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from typing import Any

# extra={...} keys we copy into the JSON line when present
_EXTRA_KEYS = ("module", "funcName", "outcome", "duration_ms", "state", "cache_key", "code")


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs to stdout."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for extra_key in _EXTRA_KEYS:
            val = getattr(record, extra_key, None)
            if val is not None and val != "":
                payload[extra_key] = val
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging() -> None:
    """Configure JSON logging for the service + uvicorn, suppress duplicate access logs."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    dict_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["console"],
        },
        "loggers": {
            "uvicorn": {"level": log_level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": log_level, "handlers": ["console"], "propagate": False},
            # we emit our own request JSON in the timing middleware
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "fastapi": {"level": log_level, "handlers": ["console"], "propagate": False},
            "starlette": {"level": log_level, "handlers": ["console"], "propagate": False},
            "dailyproxy": {"level": log_level, "handlers": ["console"], "propagate": False},
            "request": {"level": log_level, "handlers": ["console"], "propagate": False},
        },
    }

    dictConfig(dict_config)
