"""Logger factory for creating configured loggers."""
import logging
import logging.handlers
import sys
from typing import Optional, Union

from src.shared.utils.logging.context import set_service_name
from src.shared.utils.logging.formatters import StructuredJSONFormatter

_logger = logging.getLogger(__name__)


def configure_logging(
    service_name: str,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    enable_console: bool = True,
) -> None:
    """Configure the root logger to emit structured JSON.

    Args:
        service_name: Service name stamped on every line
        level: Log level as int or name ("DEBUG", "INFO", ...)
        log_file: Optional path of a rotating log file
        enable_console: Write to stdout
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    set_service_name(service_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = StructuredJSONFormatter(service_name=service_name)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # httpx logs every request at INFO, including the URL with query params
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    _logger.info(
        "Logging configured",
        extra={
            "level": logging.getLevelName(level),
            "log_file": log_file,
            "handlers_count": len(root_logger.handlers),
        },
    )


def disable_logging() -> None:
    """Drop all root handlers. Useful for tests."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(logging.NullHandler())
