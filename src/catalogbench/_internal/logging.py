"""Logging setup for the catalog service and the test client.

Everything logs under the ``catalogbench`` namespace. The service's access
log attaches request context (method, path, status, latency) through
``extra=``; the JSON formatter lifts those keys into the emitted object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

ROOT_LOGGER = "catalogbench"

# Keys copied from ``extra=`` into JSON log lines.
CONTEXT_FIELDS = ("method", "path", "status", "latency_ms", "product_id")

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, context."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            if key in record.__dict__:
                entry[key] = record.__dict__[key]
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach a single handler to the ``catalogbench`` logger.

    A second call replaces the handler, so switching between text and JSON
    output (or to another stream) takes effect immediately.

    Args:
        level: Threshold for the package logger and its handler.
        json_format: Emit JSON lines instead of plain text.
        stream: Destination, stderr by default.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))

    logger.addHandler(handler)
    logger.setLevel(level)
    # records stop here; the root logger never sees them
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``catalogbench.<name>``, e.g. ``get_logger("service.store")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
