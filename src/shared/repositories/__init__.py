"""Repository layer for database operations.

Import all repositories here for easy access.
"""

from src.shared.repositories.base import BaseRepository
from src.shared.repositories.competition_repository import (
    CompetitionListCacheRepository,
    CompetitionRepository,
    DemoAnalysisRepository,
)
from src.shared.repositories.user_repository import UserRepository

__all__ = [
    # Base classes
    "BaseRepository",
    # Competition repositories
    "CompetitionRepository",
    "CompetitionListCacheRepository",
    "DemoAnalysisRepository",
    # User repositories
    "UserRepository",
]
