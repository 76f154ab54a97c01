"""Custom exceptions for the competition mentor service.

Extends the shared exception families in src/shared/exceptions/. Each
exception carries the message shown to users and the HTTP status the API
layer answers with.
"""
from typing import Optional

from src.shared.exceptions import (
    APIAuthError,
    ExternalAPIError,
    MentorError,
)

INVALID_CREDENTIALS_MESSAGE = (
    "Invalid Kaggle credentials. Please check your username and API key in Settings."
)
MISSING_CREDENTIALS_MESSAGE = (
    "Kaggle API credentials not found. Please add your Kaggle username and API key in Settings."
)


class CredentialsNotFoundError(MentorError):
    """No Kaggle credentials are available for the caller."""

    http_status = 400

    def __init__(self, user_id: Optional[str] = None):
        super().__init__(
            message=MISSING_CREDENTIALS_MESSAGE,
            error_code="KAGGLE_CREDENTIALS_MISSING",
            details={"user_id": user_id} if user_id else None,
        )


class KaggleAuthError(APIAuthError):
    """Kaggle rejected the credentials (HTTP 401)."""

    error_code = "KAGGLE_AUTH_FAILED"
    http_status = 401

    def __init__(self, original: Optional[Exception] = None):
        super().__init__(
            message=INVALID_CREDENTIALS_MESSAGE,
            provider="kaggle",
            status_code=401,
            original=original,
        )


class KaggleAPIError(ExternalAPIError):
    """Kaggle answered with an unexpected status or payload."""

    error_code = "KAGGLE_API_ERROR"
    http_status = 502

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        super().__init__(message, provider="kaggle", status_code=status_code, original=original)


class NotebookDownloadError(ExternalAPIError):
    """A single notebook could not be downloaded."""

    error_code = "NOTEBOOK_DOWNLOAD_FAILED"
    http_status = 502

    def __init__(
        self,
        reason: str,
        notebook_ref: Optional[str] = None,
        status_code: Optional[int] = None,
        original: Optional[Exception] = None,
    ):
        self.notebook_ref = notebook_ref
        super().__init__(
            message=f"Failed to download notebook: {reason}",
            provider="kaggle",
            status_code=status_code,
            details={"notebook_ref": notebook_ref} if notebook_ref else None,
            original=original,
        )


class NotebookSourceMissingError(NotebookDownloadError):
    """Kaggle returned a kernel without its ``source`` field."""

    error_code = "NOTEBOOK_SOURCE_MISSING"

    def __init__(self, notebook_ref: Optional[str] = None):
        super().__init__("No notebook source found in API response", notebook_ref=notebook_ref)


class NotebookParseError(MentorError):
    """Notebook text is not a JSON object."""

    http_status = 422

    def __init__(self, reason: str, notebook_ref: Optional[str] = None, original: Optional[Exception] = None):
        self.notebook_ref = notebook_ref
        super().__init__(
            message=f"Could not parse notebook: {reason}",
            error_code="NOTEBOOK_PARSE_FAILED",
            details={"notebook_ref": notebook_ref} if notebook_ref else None,
            original=original,
        )


class InvalidCompetitionURLError(MentorError):
    """No competition slug can be derived from the URL."""

    http_status = 400

    def __init__(self, url: str):
        super().__init__(
            message="Could not extract competition slug from URL.",
            error_code="INVALID_COMPETITION_URL",
            details={"url": url},
        )


class TaggingError(MentorError):
    """The LLM could not tag a notebook's cells."""

    http_status = 502

    def __init__(self, reason: str, original: Optional[Exception] = None):
        super().__init__(
            message=f"Failed to tag notebook cells. Details: {reason}",
            error_code="CELL_TAGGING_FAILED",
            original=original,
        )


class ChatUnavailableError(MentorError):
    """The mentor or tutor produced no answer."""

    http_status = 503

    def __init__(self, message: str, original: Optional[Exception] = None):
        super().__init__(message=message, error_code="CHAT_UNAVAILABLE", original=original)


class ContextFileError(MentorError):
    """A context file could not be assembled."""

    http_status = 502

    def __init__(self, reason: str, original: Optional[Exception] = None):
        super().__init__(
            message=f"Failed to build context file: {reason}",
            error_code="CONTEXT_FILE_FAILED",
            original=original,
        )


class CompetitionNotFoundError(MentorError):
    """The competition has never been listed or submitted."""

    http_status = 404

    def __init__(self, competition_id: str):
        super().__init__(
            message=f"Competition '{competition_id}' not found",
            error_code="COMPETITION_NOT_FOUND",
            details={"competition_id": competition_id},
        )


class DemoNotFoundError(MentorError):
    """No demo analysis has been stored for the competition."""

    http_status = 404

    def __init__(self, competition_id: str):
        super().__init__(
            message=f"No demo analysis for '{competition_id}'",
            error_code="DEMO_NOT_FOUND",
            details={"competition_id": competition_id},
        )


class AnalysisInProgressError(MentorError):
    """Another analysis of the same competition holds the lease."""

    http_status = 409

    def __init__(self, competition_id: str):
        super().__init__(
            message=f"An analysis of '{competition_id}' is already running",
            error_code="ANALYSIS_IN_PROGRESS",
            details={"competition_id": competition_id},
        )


class AnalysisTimeoutError(MentorError):
    """An analysis exceeded its time limit and was cancelled."""

    http_status = 504

    def __init__(self, timeout_seconds: float):
        minutes = timeout_seconds / 60
        label = f"{minutes:g} minutes" if minutes != 1 else "1 minute"
        super().__init__(
            message=f"Analysis timeout after {label}",
            error_code="ANALYSIS_TIMEOUT",
            details={"timeout_seconds": timeout_seconds},
        )


def is_auth_failure(error: BaseException) -> bool:
    """True for errors that mean Kaggle rejected the credentials.

    Matches typed auth errors as well as anything whose text mentions
    ``401`` or ``Unauthorized``.
    """
    if isinstance(error, APIAuthError):
        return True
    text = str(error)
    return "401" in text or "Unauthorized" in text


__all__ = [
    "INVALID_CREDENTIALS_MESSAGE",
    "MISSING_CREDENTIALS_MESSAGE",
    "CredentialsNotFoundError",
    "KaggleAuthError",
    "KaggleAPIError",
    "NotebookDownloadError",
    "NotebookSourceMissingError",
    "NotebookParseError",
    "InvalidCompetitionURLError",
    "TaggingError",
    "ChatUnavailableError",
    "ContextFileError",
    "CompetitionNotFoundError",
    "DemoNotFoundError",
    "AnalysisInProgressError",
    "AnalysisTimeoutError",
    "is_auth_failure",
]
