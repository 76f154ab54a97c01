"""Testing utilities and mocks for the application.

Provides in-memory implementations of external services for fast, isolated tests.
"""
from src.shared.testing.mocks import (
    # LLM
    ScriptedLLMClient,
    # Repositories
    InMemoryCompetitionRepository,
    InMemoryCompetitionListCacheRepository,
    InMemoryDemoAnalysisRepository,
    InMemoryUserRepository,
    # Utilities
    utcnow,
)

__all__ = [
    "ScriptedLLMClient",
    "InMemoryCompetitionRepository",
    "InMemoryCompetitionListCacheRepository",
    "InMemoryDemoAnalysisRepository",
    "InMemoryUserRepository",
    "utcnow",
]
