"""Competition data classes.

Pydantic views over the ORM records in ``src.shared.models`` plus the
credential value object.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.services.competitions.schemas.notebook import DeconstructedNotebook


class IngestionStatus(str, Enum):
    """Lifecycle of a competition analysis.

    pending -> processing -> complete | failed; failed may be retried.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


class IngestionData(BaseModel):
    """Analysis state and results of one competition."""

    status: IngestionStatus
    summary: Optional[str] = None
    deconstructed_notebooks: Optional[List[DeconstructedNotebook]] = None
    error: Optional[str] = None


class Competition(BaseModel):
    """A Kaggle competition as shown to users.

    Attributes:
        id: Competition slug
        title: Display title
        url: Competition page
        prize: Reward text ("$25,000", "Knowledge", "N/A")
        status: "active" for listed competitions, "Custom" for user-submitted ones
        last_updated: Database time of the last ingestion change
        tags: Optional topic tags
        ingestion_data: Analysis state, absent until first analysis
    """

    id: str
    title: str
    url: str
    prize: str = "Knowledge"
    status: str = "active"
    last_updated: Optional[datetime] = None
    tags: Optional[List[str]] = None
    ingestion_data: Optional[IngestionData] = None

    @classmethod
    def from_record(cls, record: Any) -> "Competition":
        """Build from a ``CompetitionRecord`` (or any object with its attributes)."""
        ingestion = None
        if record.ingestion_status:
            ingestion = IngestionData(
                status=IngestionStatus(record.ingestion_status),
                summary=record.ingestion_summary,
                deconstructed_notebooks=record.ingestion_notebooks,
                error=record.ingestion_error,
            )
        return cls(
            id=record.id,
            title=record.title,
            url=record.url,
            prize=record.prize or "Knowledge",
            status=record.status or "active",
            last_updated=record.last_updated,
            tags=record.tags,
            ingestion_data=ingestion,
        )

    def listing_fields(self) -> Dict[str, Any]:
        """Columns written by a listing refresh; ingestion state is left alone."""
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "prize": self.prize,
            "status": self.status,
        }


class KaggleCredentials(BaseModel):
    """Kaggle username and API key.

    The key is excluded from ``repr`` so credentials never end up in logs.
    """

    username: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1, repr=False)


class UserSettings(BaseModel):
    """User settings as returned by the API (the Kaggle key is never echoed)."""

    id: str
    kaggle_username: Optional[str] = None
    has_kaggle_key: bool = False
    interests: List[str] = Field(default_factory=list)
    xp: int = 0
    level: int = 1
    competitions_analysed: int = 0

    @classmethod
    def from_record(cls, record: Any) -> "UserSettings":
        return cls(
            id=record.id,
            kaggle_username=record.kaggle_username,
            has_kaggle_key=bool(record.kaggle_key),
            interests=list(record.interests or []),
            xp=record.xp or 0,
            level=record.level or 1,
            competitions_analysed=record.competitions_analysed or 0,
        )


class DemoAnalysis(BaseModel):
    """A stored analysis shown in the landing-page demo."""

    competition_id: str
    summary: str
    deconstructed_notebooks: List[DeconstructedNotebook] = Field(default_factory=list)
    last_analyzed: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Any) -> "DemoAnalysis":
        return cls(
            competition_id=record.id,
            summary=record.summary,
            deconstructed_notebooks=record.notebooks or [],
            last_analyzed=record.last_analyzed,
        )


__all__ = [
    "IngestionStatus",
    "IngestionData",
    "Competition",
    "KaggleCredentials",
    "UserSettings",
    "DemoAnalysis",
]
