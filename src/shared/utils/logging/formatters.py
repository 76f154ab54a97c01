"""Structured JSON log formatters."""
import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from src.shared.utils.logging.context import get_context

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

_SENSITIVE_PATTERNS = (
    "api_key",
    "kaggle_key",
    "password",
    "token",
    "secret",
    "authorization",
    "credentials",
)


def _serialize_value(value: Any) -> Any:
    """Safely serialize value to JSON-compatible type."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _redact_sensitive(data: Any) -> Any:
    """Replace values under sensitive-looking keys with ``[REDACTED]``."""
    if isinstance(data, dict):
        redacted = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(pattern in key_lower for pattern in _SENSITIVE_PATTERNS):
                redacted[key] = "[REDACTED]"
            else:
                redacted[key] = _redact_sensitive(value)
        return redacted
    if isinstance(data, list):
        return [_redact_sensitive(item) for item in data]
    return data


class StructuredJSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Each line carries:
    - timestamp (ISO 8601 UTC)
    - level, logger_name, message
    - service_name, correlation_id, operation_name (from log_context)
    - any ``extra=`` fields, with secrets redacted
    - exception and stack_trace when logged with exc_info
    """

    def __init__(self, service_name: str = "unknown"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        context = get_context()

        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service_name": context.pop("service_name", None) or self.service_name,
            "logger_name": record.name,
            "message": record.getMessage(),
            "source_function": record.funcName,
            "source_line": record.lineno,
        }
        log_entry.update({k: v for k, v in context.items() if v is not None})

        extras = {
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        log_entry.update(_redact_sensitive(extras))

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
            }
            if exc_tb:
                log_entry["stack_trace"] = traceback.format_exception(exc_type, exc_value, exc_tb)

        return json.dumps(_serialize_value(log_entry), default=str)
