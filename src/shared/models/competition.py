"""Competition and cached listing models."""
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.models.base import Base, TimestampMixin

INGESTION_PENDING = "pending"
INGESTION_PROCESSING = "processing"
INGESTION_COMPLETE = "complete"
INGESTION_FAILED = "failed"
ACTIVE_INGESTION_STATES = (INGESTION_PENDING, INGESTION_PROCESSING)


class CompetitionRecord(Base, TimestampMixin):
    """A Kaggle competition and the state of its notebook analysis.

    The ingestion fields are flattened into columns so that the status can
    be compared-and-swapped in a single UPDATE. ``last_updated`` is the
    ingestion heartbeat the stuck-analysis janitor reads.
    """

    __tablename__ = "competitions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    prize: Mapped[str] = mapped_column(String(255), nullable=False, default="Knowledge")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    tags: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # pending | processing | complete | failed, NULL when never analysed
    ingestion_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    ingestion_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ingestion_notebooks: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    ingestion_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<CompetitionRecord(id={self.id}, ingestion_status={self.ingestion_status})>"


class CompetitionListCache(Base):
    """Snapshot of the competition listing shown to users."""

    __tablename__ = "competition_list_cache"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    competitions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    last_refresh: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CompetitionListCache(key={self.key}, last_refresh={self.last_refresh})>"


class DemoAnalysisRecord(Base):
    """Stored analysis of a showcase competition for the landing-page demo.

    Kept apart from ``CompetitionRecord`` so demo runs never touch a
    user's analysis state.
    """

    __tablename__ = "demo_analyses"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    notebooks: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    last_analyzed: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<DemoAnalysisRecord(id={self.id}, last_analyzed={self.last_analyzed})>"
