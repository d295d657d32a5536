"""Logging configuration for the discovery API."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

REQUEST_LOGGER = "discovery.api.requests"
AUDIT_LOGGER = "discovery.api.audit"
PERFORMANCE_LOGGER = "discovery.api.performance"

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: str = "INFO", log_format: str = "text") -> None:
    """Install a single console handler on the ``discovery`` logger tree.

    Calling it again replaces the handler instead of adding another.
    """
    handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger("discovery")
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Third-party clients are chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def get_request_logger() -> logging.Logger:
    return logging.getLogger(REQUEST_LOGGER)


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER)


def get_performance_logger() -> logging.Logger:
    return logging.getLogger(PERFORMANCE_LOGGER)
