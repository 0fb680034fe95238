"""Structured JSON logging configuration.

All log output goes to stderr in JSON format so that the CLI can keep
stdout for machine-readable results.

Format per line:
    {"ts": "2025-03-01T12:00:00Z", "level": "INFO", "logger": "buildsniff.services.artifact_service", "msg": "...", ...}
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        # Include artifact_type if attached to the record via extra={}
        if hasattr(record, "artifact_type"):
            payload["artifact_type"] = record.artifact_type

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(level_name: str | None = None) -> None:
    """Configure root logger with JSON output to stderr.

    The log level is controlled by the ``LOG_LEVEL`` env var
    (default ``INFO``) unless ``level_name`` is given.
    """
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers (e.g. uvicorn defaults)
    root.handlers.clear()
    root.addHandler(handler)

    for noisy in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
