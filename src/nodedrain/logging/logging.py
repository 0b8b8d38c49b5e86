"""
JSON and text logging formatters with structured context support.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from nodedrain.settings import ENABLE_JSON_LOGS, LOG_LEVEL


def _get_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the structured context attached via ``extra={"context": {...}}``."""
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        :param record: Log record to format
        :return: JSON formatted log string
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in _get_context(record).items():
            # Never let context clobber the base fields
            log_entry.setdefault(key, value)

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain text formatter that appends structured context as key=value pairs."""

    def __init__(self) -> None:
        super().__init__(
            fmt="[%(asctime)s] %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = _get_context(record)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} {pairs}"
        return message


def setup_logging(log_level: str = None, enable_json_logs: bool = None) -> None:
    """Configure logging with JSON or text format.

    :param log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    :param enable_json_logs: Enable JSON formatted logs
    """
    _log_level = LOG_LEVEL if log_level is None else log_level
    _enable_json_logs = ENABLE_JSON_LOGS if enable_json_logs is None else enable_json_logs
    # Clear any existing handlers
    logging.getLogger().handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if _enable_json_logs else TextFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, _log_level, logging.INFO))
    root_logger.addHandler(handler)
