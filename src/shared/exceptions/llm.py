"""LLM-related exceptions."""
from typing import Optional

from src.shared.exceptions.base import MentorError


class LLMError(MentorError):
    """Base exception for LLM errors.

    Args:
        message: Human-readable error message
        provider: LLM provider (anthropic, openai)
        model: Model name that failed
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        details: Optional[dict] = None,
        original: Optional[Exception] = None,
    ):
        self.provider = provider
        self.model = model
        super().__init__(
            message=message,
            error_code="LLM_ERROR",
            details=details,
            original=original,
        )

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.append(f"Provider: {self.provider}")
        if self.model:
            parts.append(f"Model: {self.model}")
        return " | ".join(parts)


class LLMTimeoutError(LLMError):
    """LLM request timed out."""

    def __init__(
        self,
        message: str = "LLM request timed out",
        provider: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, provider, model, details, original)


class LLMRateLimitError(LLMError):
    """LLM provider rate limit exceeded."""

    def __init__(
        self,
        message: str = "LLM rate limit exceeded",
        provider: Optional[str] = None,
        model: Optional[str] = None,
        retry_after: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if retry_after is not None:
            details["retry_after_seconds"] = retry_after
        super().__init__(message, provider, model, details, original)


class LLMProviderError(LLMError):
    """LLM provider returned an error."""

    def __init__(
        self,
        message: str = "LLM provider error",
        provider: Optional[str] = None,
        model: Optional[str] = None,
        provider_code: Optional[str] = None,
        original: Optional[Exception] = None,
    ):
        details = {}
        if provider_code is not None:
            details["provider_code"] = provider_code
        super().__init__(message, provider, model, details, original)

