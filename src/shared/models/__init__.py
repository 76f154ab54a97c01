"""SQLAlchemy models for the Kaggle mentor.

Import all models here to ensure they're registered with Base.metadata.
"""

from src.shared.models.base import Base, TimestampMixin
from src.shared.models.competition import (
    CompetitionListCache,
    CompetitionRecord,
    DemoAnalysisRecord,
)
from src.shared.models.user import UserRecord

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Competition models
    "CompetitionRecord",
    "CompetitionListCache",
    "DemoAnalysisRecord",
    # User models
    "UserRecord",
]
