"""Logging configuration with structured JSON output."""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from .config import settings


# Request and sync context attached with logger.x(..., extra={"operation": ...})
CONTEXT_FIELDS = (
    "operation",
    "method",
    "url",
    "status_code",
    "error_code",
    "rid",
    "previous_rid",
    "torrent_hash",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        return json.dumps(log_data)


def setup_logging() -> logging.Logger:
    """Configure the package logger."""
    logger = logging.getLogger("qbitclient")
    logger.setLevel(getattr(logging, settings.log_level))

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    logger.propagate = False

    return logger


logger = setup_logging()
