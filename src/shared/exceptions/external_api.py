"""External API-related exceptions."""
from typing import Optional

from src.shared.exceptions.base import MentorError


class ExternalAPIError(MentorError):
    """Base exception for external API errors.

    Args:
        message: Human-readable error message
        provider: External service (kaggle)
        status_code: HTTP status code if available
        details: Additional error context
        original: Underlying transport exception, if any
    """

    error_code = "EXTERNAL_API_ERROR"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
        original: Optional[Exception] = None,
    ):
        self.provider = provider
        self.status_code = status_code
        full_details = dict(details or {})
        if provider:
            full_details["provider"] = provider
        if status_code is not None:
            full_details["status_code"] = status_code
        super().__init__(
            message=message,
            error_code=type(self).error_code,
            details=full_details,
            original=original,
        )

    @property
    def is_transient(self) -> bool:
        """Whether repeating the same request may succeed."""
        return False

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.append(f"Provider: {self.provider}")
        if self.status_code:
            parts.append(f"Status: {self.status_code}")
        return " | ".join(parts)


class APITimeoutError(ExternalAPIError):
    """External API request timed out."""

    error_code = "API_TIMEOUT"

    def __init__(
        self,
        message: str = "API request timed out",
        provider: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, provider, None, details, original)

    @property
    def is_transient(self) -> bool:
        return True


class APIConnectionError(ExternalAPIError):
    """Failed to connect to external API."""

    error_code = "API_CONNECTION_FAILED"

    def __init__(
        self,
        message: str = "Failed to connect to API",
        provider: Optional[str] = None,
        endpoint: Optional[str] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if endpoint is not None:
            details["endpoint"] = endpoint
        super().__init__(message, provider, None, details, original)

    @property
    def is_transient(self) -> bool:
        return True


class APIAuthError(ExternalAPIError):
    """External API rejected the supplied credentials (401/403)."""

    error_code = "API_AUTH_FAILED"

    def __init__(
        self,
        message: str = "API authentication failed",
        provider: Optional[str] = None,
        status_code: Optional[int] = 401,
        original: Optional[Exception] = None,
    ):
        super().__init__(message, provider, status_code, None, original)


class APIRateLimitError(ExternalAPIError):
    """External API rate limit exceeded."""

    error_code = "API_RATE_LIMITED"

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        provider: Optional[str] = None,
        retry_after: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if retry_after is not None:
            details["retry_after_seconds"] = retry_after
        super().__init__(message, provider, 429, details, original)
        self.retry_after = retry_after

    @property
    def is_transient(self) -> bool:
        return True


class APIServerError(ExternalAPIError):
    """External API returned 5xx error."""

    error_code = "API_SERVER_ERROR"

    def __init__(
        self,
        message: str = "External API server error",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        super().__init__(message, provider, status_code, None, original)

    @property
    def is_transient(self) -> bool:
        return True


class APINotFoundError(ExternalAPIError):
    """External API returned 404 for the requested resource."""

    error_code = "API_NOT_FOUND"

    def __init__(
        self,
        message: str = "Resource not found",
        provider: Optional[str] = None,
        resource: Optional[str] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if resource is not None:
            details["resource"] = resource
        super().__init__(message, provider, 404, details, original)


class APIInvalidResponseError(ExternalAPIError):
    """External API returned invalid/unexpected response."""

    error_code = "API_INVALID_RESPONSE"

    def __init__(
        self,
        message: str = "Invalid API response",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        response_snippet: Optional[str] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if response_snippet is not None:
            details["response_snippet"] = response_snippet[:500]
        super().__init__(message, provider, status_code, details, original)


class APIClientError(ExternalAPIError):
    """External API returned 4xx client error (not auth/rate limit/not found)."""

    error_code = "API_CLIENT_ERROR"

    def __init__(
        self,
        message: str = "API client error",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        super().__init__(message, provider, status_code, None, original)
