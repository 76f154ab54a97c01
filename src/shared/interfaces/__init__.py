"""Protocols shared across services.

Concrete classes live in ``src.shared.llm`` and ``src.shared.repositories``;
the in-memory doubles in ``src.shared.testing`` satisfy the same protocols.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

T = TypeVar("T")


class IStructuredLLM(Protocol):
    """Given a prompt, return a value conforming to a type, or None."""

    async def generate(
        self,
        prompt: str,
        output_type: Type[T],
        system: Optional[str] = None,
    ) -> Optional[T]:
        """Generate a value of ``output_type``.

        Returns None when the model produced no usable output.

        Raises:
            LLMError: When the provider call fails
        """
        ...

    async def health_check(self) -> bool:
        ...


class ICompetitionRepository(Protocol):
    """Persistence for competitions and their ingestion state."""

    async def get(self, id: str) -> Optional[Any]:
        ...

    async def get_all(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Any]:
        ...

    async def upsert(self, id: str, **fields: Any) -> Any:
        ...

    async def upsert_many(self, rows: List[Dict[str, Any]]) -> int:
        ...

    async def try_begin_analysis(self, competition_id: str, stale_before: datetime) -> bool:
        ...

    async def try_queue_analysis(self, competition_id: str, stale_before: datetime, **fields: Any) -> bool:
        ...

    async def mark_complete(self, competition_id: str, summary: str, notebooks: List[Dict[str, Any]]) -> None:
        ...

    async def mark_failed(self, competition_id: str, error: str) -> None:
        ...

    async def reset_stuck(self, cutoff: datetime, error: str) -> int:
        ...


class ICompetitionListCache(Protocol):
    """Persistence for the competition listing snapshot."""

    async def get_snapshot(self, key: str) -> Optional[Any]:
        ...

    async def save_snapshot(self, key: str, competitions: List[Dict[str, Any]]) -> Any:
        ...


class IDemoAnalysisRepository(Protocol):
    """Persistence for the landing-page demo analyses."""

    async def get_demo(self, competition_id: str) -> Optional[Any]:
        ...

    async def save_demo(self, competition_id: str, summary: str, notebooks: List[Dict[str, Any]]) -> Any:
        ...


class IUserRepository(Protocol):
    """Persistence for per-user settings."""

    async def get(self, id: str) -> Optional[Any]:
        ...

    async def save_kaggle_credentials(self, user_id: str, username: str, key: str) -> Any:
        ...

    async def get_kaggle_credentials(self, user_id: str) -> Optional[tuple]:
        ...

    async def add_interest(self, user_id: str, interest: str) -> Any:
        ...

    async def remove_interest(self, user_id: str, interest: str) -> Optional[Any]:
        ...

    async def save_progress(self, user_id: str, xp: int, level: int, competitions_analysed: int) -> Any:
        ...


__all__ = [
    "IStructuredLLM",
    "ICompetitionRepository",
    "ICompetitionListCache",
    "IDemoAnalysisRepository",
    "IUserRepository",
]
