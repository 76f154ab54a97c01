"""Database-related exceptions."""
from typing import Optional

from src.shared.exceptions.base import MentorError


class DatabaseError(MentorError):
    """Base exception for database errors.

    Args:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional context as dictionary
        original: Original exception if wrapping another exception
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
        original: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code or "DB_ERROR",
            details=details,
            original=original,
        )


class RepositoryNotFoundError(DatabaseError):
    """Raised when a repository operation targets a row that does not exist.

    Example: updating the ingestion state of a competition that was never listed.
    """

    def __init__(
        self,
        message: str = "Repository object not found",
        details: Optional[dict] = None,
        original: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code="REPOSITORY_NOT_FOUND",
            details=details,
            original=original,
        )


class RepositoryConflictError(DatabaseError):
    """Raised when a write violates a constraint (duplicate key, bad reference)."""

    def __init__(
        self,
        message: str = "Repository conflict error",
        details: Optional[dict] = None,
        original: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code="REPOSITORY_CONFLICT",
            details=details,
            original=original,
        )
