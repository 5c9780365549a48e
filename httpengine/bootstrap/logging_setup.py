"""Logging configuration for the server."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from httpengine.domain.connection_id import ROOT_LOGGER_NAME, ConnectionLoggerAdapter

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(connection_id)s] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

EXTRA_KEYS = (
    "client",
    "method",
    "target",
    "path",
    "query",
    "proto",
    "status_code",
    "content_length",
    "bytes_in",
    "bytes_out",
    "remaining_bytes",
    "error_type",
    "error",
    "host",
    "port",
    "log_level",
    "log_destination",
    "log_format",
    "routes",
    "signal",
)


class ConnectionIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Give records logged outside an adapter a placeholder connection_id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "connection_id"):
            record.connection_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, keys sorted."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "connection_id": getattr(record, "connection_id", "-"),
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }
        if hasattr(record, "event"):
            log_data["event"] = record.event
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, sort_keys=True, default=str)


def _resolve_level(level_name: str) -> int:
    level = getattr(logging, level_name.upper(), None)
    if isinstance(level, int):
        return level
    return logging.INFO


def _build_handler(
    destination: Optional[str], level: int, log_format: str = "json"
) -> logging.Handler:
    """Create a stdout or rotating file handler."""
    if destination and destination.lower() != "stdout":
        target_path = Path(destination)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            target_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if log_format == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, DATE_FORMAT))
    else:
        handler.setFormatter(JsonFormatter(datefmt=DATE_FORMAT))
    handler.addFilter(ConnectionIdFilter())
    return handler


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, log_format: str = "json"
) -> ConnectionLoggerAdapter:
    """Install a single handler on the ``httpengine`` logger and return an adapter."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    numeric_level = _resolve_level(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.addHandler(_build_handler(destination, numeric_level, log_format))

    adapter = ConnectionLoggerAdapter(logger, {})
    adapter.info(
        "Logging configured",
        extra={
            "event": "logging_configured",
            "log_level": logging.getLevelName(numeric_level),
            "log_destination": destination or "stdout",
            "log_format": log_format,
        },
    )
    return adapter
