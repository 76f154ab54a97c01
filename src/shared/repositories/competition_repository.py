"""Competition, competition-listing and demo analysis repositories."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.shared.exceptions import RepositoryConflictError
from src.shared.models.competition import (
    ACTIVE_INGESTION_STATES,
    INGESTION_COMPLETE,
    INGESTION_FAILED,
    INGESTION_PENDING,
    INGESTION_PROCESSING,
    CompetitionListCache,
    CompetitionRecord,
    DemoAnalysisRecord,
)
from src.shared.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _lease_free(stale_before: datetime):
    """No analysis is running, or the running one stopped heartbeating before ``stale_before``."""
    return or_(
        CompetitionRecord.ingestion_status.is_(None),
        CompetitionRecord.ingestion_status != INGESTION_PROCESSING,
        CompetitionRecord.last_updated.is_(None),
        CompetitionRecord.last_updated < stale_before,
    )


class CompetitionRepository(BaseRepository[CompetitionRecord]):
    """Repository for competitions and their ingestion state."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(CompetitionRecord, session_factory)

    async def upsert_many(self, rows: List[Dict[str, Any]]) -> int:
        """Merge listing metadata for many competitions in one transaction.

        Each row must carry ``id``. Ingestion columns of existing rows are
        preserved unless a row names them.

        Returns:
            Number of rows written
        """
        async with self._session("upsert_many") as session:
            for row in rows:
                fields = dict(row)
                competition_id = fields.pop("id")
                instance = await session.get(CompetitionRecord, competition_id)
                if instance is None:
                    session.add(CompetitionRecord(id=competition_id, **fields))
                else:
                    for key, value in fields.items():
                        setattr(instance, key, value)
        logger.info(f"CompetitionRepository: Upserted {len(rows)} competitions")
        return len(rows)

    async def try_begin_analysis(self, competition_id: str, stale_before: datetime) -> bool:
        """Atomically move a competition into ``processing``.

        Succeeds unless another analysis holds the lease: the row is already
        ``processing`` and its heartbeat is newer than ``stale_before``.

        Returns:
            True if this caller now owns the analysis
        """
        stmt = (
            update(CompetitionRecord)
            .where(CompetitionRecord.id == competition_id)
            .where(_lease_free(stale_before))
            .values(
                ingestion_status=INGESTION_PROCESSING,
                ingestion_error=None,
                last_updated=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        async with self._session("begin_analysis") as session:
            result = await session.execute(stmt)
            acquired = result.rowcount == 1
        logger.debug(f"CompetitionRepository: Lease on {competition_id} acquired={acquired}")
        return acquired

    async def try_queue_analysis(self, competition_id: str, stale_before: datetime, **fields: Any) -> bool:
        """Write ``fields`` and mark the competition ``pending`` unless an analysis holds the lease.

        Check and write are one UPDATE guarded like ``try_begin_analysis``.
        Unknown competitions are inserted.

        Returns:
            False if a running analysis (or a concurrent insert) won
        """
        values = dict(fields, ingestion_status=INGESTION_PENDING, ingestion_error=None)
        stmt = (
            update(CompetitionRecord)
            .where(CompetitionRecord.id == competition_id)
            .where(_lease_free(stale_before))
            .values(last_updated=func.now(), **values)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session("queue_analysis") as session:
                result = await session.execute(stmt)
                if result.rowcount == 1:
                    return True
                if await session.get(CompetitionRecord, competition_id) is not None:
                    logger.debug(f"CompetitionRepository: {competition_id} is already being analysed")
                    return False
                session.add(CompetitionRecord(id=competition_id, **values))
        except RepositoryConflictError:
            return False
        return True

    async def mark_complete(
        self,
        competition_id: str,
        summary: str,
        notebooks: List[Dict[str, Any]],
    ) -> None:
        """Store a finished analysis and clear any previous error."""
        await self._finish(
            competition_id,
            ingestion_status=INGESTION_COMPLETE,
            ingestion_summary=summary,
            ingestion_notebooks=notebooks,
            ingestion_error=None,
        )

    async def mark_failed(self, competition_id: str, error: str) -> None:
        """Record a failed analysis, keeping any earlier summary."""
        await self._finish(
            competition_id,
            ingestion_status=INGESTION_FAILED,
            ingestion_error=error,
        )

    async def _finish(self, competition_id: str, **values: Any) -> None:
        stmt = (
            update(CompetitionRecord)
            .where(CompetitionRecord.id == competition_id)
            .values(last_updated=func.now(), **values)
            .execution_options(synchronize_session=False)
        )
        async with self._session("finish_analysis") as session:
            await session.execute(stmt)

    async def reset_stuck(self, cutoff: datetime, error: str) -> int:
        """Fail every pending/processing analysis whose heartbeat predates ``cutoff``.

        Returns:
            Number of competitions reset
        """
        stmt = (
            update(CompetitionRecord)
            .where(CompetitionRecord.ingestion_status.in_(ACTIVE_INGESTION_STATES))
            .where(
                or_(
                    CompetitionRecord.last_updated.is_(None),
                    CompetitionRecord.last_updated < cutoff,
                )
            )
            .values(
                ingestion_status=INGESTION_FAILED,
                ingestion_error=error,
                last_updated=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        async with self._session("reset_stuck") as session:
            result = await session.execute(stmt)
            count = result.rowcount or 0
        if count:
            logger.warning(f"CompetitionRepository: Reset {count} stuck analyses")
        return count


class CompetitionListCacheRepository(BaseRepository[CompetitionListCache]):
    """Repository for the cached competition listing."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(CompetitionListCache, session_factory)

    async def get_snapshot(self, key: str) -> Optional[CompetitionListCache]:
        return await self.get(key)

    async def save_snapshot(self, key: str, competitions: List[Dict[str, Any]]) -> CompetitionListCache:
        """Replace the snapshot and stamp ``last_refresh`` with the database clock."""
        return await self.upsert(key, competitions=competitions, last_refresh=func.now())


class DemoAnalysisRepository(BaseRepository[DemoAnalysisRecord]):
    """Repository for the stored landing-page demo analyses."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(DemoAnalysisRecord, session_factory)

    async def get_demo(self, competition_id: str) -> Optional[DemoAnalysisRecord]:
        return await self.get(competition_id)

    async def save_demo(
        self,
        competition_id: str,
        summary: str,
        notebooks: List[Dict[str, Any]],
    ) -> DemoAnalysisRecord:
        """Store the analysis, replacing any earlier one, and stamp ``last_analyzed``."""
        logger.info(f"DemoAnalysisRepository: Saving demo for {competition_id} ({len(notebooks)} notebooks)")
        return await self.upsert(
            competition_id,
            summary=summary,
            notebooks=notebooks,
            last_analyzed=func.now(),
        )
