"""Configuration-related exceptions."""
from typing import Optional

from src.shared.exceptions.base import MentorError


class ConfigError(MentorError):
    """Base exception for configuration errors.

    Args:
        message: Human-readable error message
        config_file: Path to config file
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        details: Optional[dict] = None,
        original: Optional[Exception] = None,
    ):
        self.config_file = config_file
        full_details = dict(details or {})
        if config_file:
            full_details["config_file"] = config_file
        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            details=full_details,
            original=original,
        )

    def __str__(self) -> str:
        parts = [self.message]
        if self.config_file:
            parts.append(f"Config: {self.config_file}")
        return " | ".join(parts)


class ConfigNotFoundError(ConfigError):
    """Configuration file not found."""

    def __init__(
        self,
        message: str = "Configuration file not found",
        config_file: Optional[str] = None,
    ):
        super().__init__(message, config_file)


class ConfigParseError(ConfigError):
    """Failed to parse configuration file."""

    def __init__(
        self,
        message: str = "Failed to parse config file",
        config_file: Optional[str] = None,
        line_number: Optional[int] = None,
        column_number: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if line_number is not None:
            details["line"] = line_number
        if column_number is not None:
            details["column"] = column_number
        super().__init__(message, config_file, details, original)


class ConfigValidationError(ConfigError):
    """Configuration failed validation."""

    def __init__(
        self,
        message: str = "Configuration validation failed",
        config_file: Optional[str] = None,
        field_errors: Optional[dict] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if field_errors is not None:
            details["field_errors"] = field_errors
        super().__init__(message, config_file, details, original)
