"""Logging helpers for formwire.

Every module logs through ``logging.getLogger(__name__)``; this module only
configures handlers, with an optional JSON formatter for log aggregation.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from formwire.lib.settings import FormwireSettings, get_settings

__all__ = ["JSONFormatter", "setup_logging", "setup_logging_from_settings"]

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formatter that renders log records as JSON.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "WARNING",
         "logger": "formwire.lib.validation", "message": "Validator 'x' raised ..."}
    """

    def __init__(
        self,
        include_fields: Optional[List[str]] = None,
        exclude_fields: Optional[List[str]] = None,
    ):
        super().__init__()
        self.include_fields = include_fields or []
        self.exclude_fields = exclude_fields or []

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as JSON."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            payload["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for field_name in self.include_fields:
            if hasattr(record, field_name):
                payload[field_name] = getattr(record, field_name)

        extra_attrs = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _RESERVED and k not in self.exclude_fields
        }
        if extra_attrs:
            payload["extra"] = extra_attrs

        return json.dumps(payload, default=str)


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
    level: Optional[str] = None,
) -> None:
    """Configure the root logger with optional JSON formatting.

    Args:
        verbose: Force DEBUG level
        json_format: Use JSONFormatter instead of the console format
        log_file: Also write logs to this file
        level: Explicit level name, used when ``verbose`` is False
    """
    if verbose:
        resolved = logging.DEBUG
    else:
        resolved = getattr(logging, (level or "INFO").upper(), logging.INFO)

    formatter = JSONFormatter() if json_format else logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def setup_logging_from_settings(
    settings: Optional[FormwireSettings] = None,
    verbose: bool = False,
) -> None:
    """Configure logging from FormwireSettings (environment driven)."""
    settings = settings or get_settings()
    setup_logging(
        verbose=verbose,
        json_format=settings.log_format == "json",
        log_file=settings.log_file,
        level=settings.log_level,
    )
