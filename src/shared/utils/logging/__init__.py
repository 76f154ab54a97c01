"""Structured JSON logging utility."""

from src.shared.utils.logging.context import (
    get_context,
    get_correlation_id,
    get_operation_name,
    get_service_name,
    log_context,
    new_correlation_id,
)
from src.shared.utils.logging.factory import configure_logging, disable_logging
from src.shared.utils.logging.formatters import StructuredJSONFormatter

__all__ = [
    # Context management
    "get_context",
    "get_correlation_id",
    "get_operation_name",
    "get_service_name",
    "log_context",
    "new_correlation_id",
    # Factory
    "configure_logging",
    "disable_logging",
    # Formatters
    "StructuredJSONFormatter",
]
