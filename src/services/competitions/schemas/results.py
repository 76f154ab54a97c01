"""Result envelopes that keep degraded and partial outcomes visible."""
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from src.services.competitions.schemas.notebook import DeconstructedNotebook

T = TypeVar("T")


class FetchResult(BaseModel, Generic[T]):
    """A value plus whether it came from a fallback instead of Kaggle.

    Attributes:
        value: The listing (real or fallback)
        degraded: True when Kaggle failed and ``value`` is a substitute
        reason: Why the result is degraded
    """

    value: T
    degraded: bool = False
    reason: Optional[str] = None

    @classmethod
    def ok(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, reason: str) -> "FetchResult[T]":
        return cls(value=value, degraded=True, reason=reason)


class NotebookFailure(BaseModel):
    """Why one notebook dropped out of an ingestion run."""

    ref: str
    error_type: str
    message: str


class BatchResult(BaseModel, Generic[T]):
    """Outcome of a fan-out where individual items may fail."""

    succeeded: List[T] = Field(default_factory=list)
    failed: List[NotebookFailure] = Field(default_factory=list)


class IngestionReport(BaseModel):
    """What the ingestion pipeline returns.

    Attributes:
        competition_slug: Slug the run was for
        summary: One-paragraph competition summary or an explanatory sentence
        deconstructed_notebooks: Processed notebooks in vote-ranked order
        failures: Notebooks that were listed but could not be processed
    """

    competition_slug: str
    summary: str
    deconstructed_notebooks: List[DeconstructedNotebook] = Field(default_factory=list)
    failures: List[NotebookFailure] = Field(default_factory=list)


__all__ = [
    "FetchResult",
    "NotebookFailure",
    "BatchResult",
    "IngestionReport",
]
