"""Custom exceptions for the application."""

from src.shared.exceptions.base import MentorError

from src.shared.exceptions.database import (
    DatabaseError,
    RepositoryConflictError,
    RepositoryNotFoundError,
)

from src.shared.exceptions.llm import (
    LLMError,
    LLMTimeoutError,
    LLMRateLimitError,
    LLMProviderError,
)

from src.shared.exceptions.external_api import (
    ExternalAPIError,
    APITimeoutError,
    APIConnectionError,
    APIAuthError,
    APIRateLimitError,
    APIServerError,
    APINotFoundError,
    APIInvalidResponseError,
    APIClientError,
)

from src.shared.exceptions.config import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)

__all__ = [
    # Base exception
    "MentorError",
    # Database exceptions
    "DatabaseError",
    "RepositoryNotFoundError",
    "RepositoryConflictError",
    # LLM exceptions
    "LLMError",
    "LLMTimeoutError",
    "LLMRateLimitError",
    "LLMProviderError",
    # External API exceptions
    "ExternalAPIError",
    "APITimeoutError",
    "APIConnectionError",
    "APIAuthError",
    "APIRateLimitError",
    "APIServerError",
    "APINotFoundError",
    "APIInvalidResponseError",
    "APIClientError",
    # Configuration exceptions
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
]
