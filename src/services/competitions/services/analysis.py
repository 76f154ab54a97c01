"""Competition analysis service.

Owns everything around the ingestion pipeline that touches storage: the
competition listing cache, the per-competition analysis lease, the
analysis timeout, the stuck-analysis janitor and per-user settings.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set

from src.shared.exceptions import MentorError
from src.shared.interfaces import (
    ICompetitionListCache,
    ICompetitionRepository,
    IStructuredLLM,
    IUserRepository,
)
from src.shared.utils.logging import log_context, new_correlation_id
from src.services.competitions.config import CompetitionServiceConfig
from src.services.competitions.exceptions import (
    AnalysisInProgressError,
    AnalysisTimeoutError,
    CompetitionNotFoundError,
    KaggleAuthError,
    is_auth_failure,
)
from src.services.competitions.interfaces import ICredentialResolver, IKaggleAPI
from src.services.competitions.schemas import (
    Competition,
    FetchResult,
    IngestionReport,
    UserSettings,
)
from src.services.competitions.services.pipeline import (
    IngestionPipeline,
    extract_competition_slug,
)


logger = logging.getLogger(__name__)

GLOBAL_CACHE_KEY = "global"
STUCK_ANALYSIS_MESSAGE = "Analysis timed out - please retry"
UNKNOWN_FAILURE_MESSAGE = "Analysis failed due to unknown error"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AnalysisService:
    """Coordinates listing refreshes, analyses and user settings.

    Example:
        service = AnalysisService(
            competitions=CompetitionRepository(factory),
            list_cache=CompetitionListCacheRepository(factory),
            users=UserRepository(factory),
            credential_resolver=resolver,
            kaggle_api=kaggle,
            pipeline=pipeline,
        )
        competition = await service.submit_custom_competition(uid, url)
    """

    def __init__(
        self,
        competitions: ICompetitionRepository,
        list_cache: ICompetitionListCache,
        users: IUserRepository,
        credential_resolver: ICredentialResolver,
        kaggle_api: IKaggleAPI,
        pipeline: IngestionPipeline,
        config: Optional[CompetitionServiceConfig] = None,
        llm: Optional[IStructuredLLM] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.competitions = competitions
        self.list_cache = list_cache
        self.users = users
        self.credential_resolver = credential_resolver
        self.kaggle_api = kaggle_api
        self.pipeline = pipeline
        self.config = config or CompetitionServiceConfig()
        self.llm = llm
        self._clock = clock
        self._background: Set[asyncio.Task] = set()

    # ==================== Competition listing ====================

    async def refresh_competitions(self, user_id: str) -> FetchResult[List[Competition]]:
        """Fetch the live listing and store it.

        Listing metadata is merged into stored competitions so existing
        analyses survive. A degraded (built-in) listing is returned but
        never stored.

        Raises:
            CredentialsNotFoundError: If the caller has no Kaggle credentials
        """
        credentials = await self.credential_resolver.resolve_or_raise(user_id)
        result = await self.kaggle_api.list_competitions(credentials)
        if result.degraded:
            logger.warning(f"Competition refresh degraded, cache left untouched: {result.reason}")
            return result

        await self.competitions.upsert_many([c.listing_fields() for c in result.value])
        await self.list_cache.save_snapshot(
            GLOBAL_CACHE_KEY,
            [c.listing_fields() for c in result.value],
        )
        logger.info(f"Refreshed {len(result.value)} competitions")
        return result

    async def get_cached_competitions(self) -> List[Competition]:
        """Return the cached listing with current analysis state.

        Stuck analyses are reset first. A missing or stale snapshot gives
        an empty list.
        """
        await self._reset_stuck(self.config.stuck_threshold_seconds)

        snapshot = await self.list_cache.get_snapshot(GLOBAL_CACHE_KEY)
        if snapshot is None or snapshot.last_refresh is None:
            return []

        age = self._clock() - _as_utc(snapshot.last_refresh)
        if age > timedelta(days=self.config.cache_ttl_days):
            logger.info(f"Competition cache is stale ({age.days} days old)")
            return []

        records = {record.id: record for record in await self.competitions.get_all()}
        listing = []
        for item in snapshot.competitions or []:
            record = records.get(item.get("id"))
            listing.append(Competition.from_record(record) if record is not None else Competition(**item))
        return listing

    async def get_competition(self, competition_id: str) -> Competition:
        record = await self.competitions.get(competition_id)
        if record is None:
            raise CompetitionNotFoundError(competition_id)
        return Competition.from_record(record)

    # ==================== Analysis ====================

    async def submit_custom_competition(self, user_id: str, competition_url: str) -> Competition:
        """Register a user-supplied competition and analyse it in the background.

        Raises:
            InvalidCompetitionURLError: No slug in the URL
            AnalysisInProgressError: The competition is already being analysed
        """
        competition_url = str(competition_url)
        slug = extract_competition_slug(competition_url)

        stale_before = self._clock() - timedelta(seconds=self.config.stuck_threshold_seconds)
        queued = await self.competitions.try_queue_analysis(
            slug,
            stale_before,
            title=f"Custom: {slug}",
            url=competition_url,
            prize="N/A",
            status="Custom",
        )
        if not queued:
            raise AnalysisInProgressError(slug)

        record = await self.competitions.get(slug)
        logger.info(f"Custom competition submitted: {slug}", extra={"user_id": user_id})

        self._spawn(self.run_analysis(user_id, slug), name=f"analysis:{slug}")
        return Competition.from_record(record)

    async def run_analysis(self, user_id: Optional[str], competition_id: str) -> IngestionReport:
        """Analyse one competition and store the outcome.

        The stored status always ends as ``complete`` or ``failed``; the
        error is re-raised after it has been recorded.

        Raises:
            CompetitionNotFoundError: Unknown competition
            AnalysisInProgressError: Another analysis holds the lease
            AnalysisTimeoutError: The pipeline exceeded the time limit
            MentorError: Any recorded pipeline failure
        """
        record = await self.competitions.get(competition_id)
        if record is None:
            raise CompetitionNotFoundError(competition_id)

        stale_before = self._clock() - timedelta(seconds=self.config.stuck_threshold_seconds)
        if not await self.competitions.try_begin_analysis(competition_id, stale_before):
            raise AnalysisInProgressError(competition_id)

        async with log_context(
            correlation_id=new_correlation_id(),
            operation_name="run_analysis",
            competition_id=competition_id,
        ):
            logger.info(f"Analysis started for {competition_id}")
            try:
                credentials = await self.credential_resolver.resolve(user_id)
                report = await asyncio.wait_for(
                    self.pipeline.run(record.url, credentials),
                    timeout=self.config.analysis_timeout_seconds,
                )
            except asyncio.TimeoutError as e:
                error = AnalysisTimeoutError(self.config.analysis_timeout_seconds)
                await self.competitions.mark_failed(competition_id, error.message)
                logger.error(f"Analysis of {competition_id} timed out")
                raise error from e
            except MentorError as e:
                message = KaggleAuthError().message if is_auth_failure(e) else e.message
                await self.competitions.mark_failed(competition_id, message)
                logger.error(
                    f"Analysis of {competition_id} failed: {message}",
                    extra={"error_type": type(e).__name__},
                )
                raise
            except Exception as e:
                await self.competitions.mark_failed(competition_id, UNKNOWN_FAILURE_MESSAGE)
                logger.exception(f"Analysis of {competition_id} failed unexpectedly: {e}")
                raise

            await self.competitions.mark_complete(
                competition_id,
                summary=report.summary,
                notebooks=[nb.model_dump(mode="json") for nb in report.deconstructed_notebooks],
            )
            logger.info(
                f"Analysis of {competition_id} complete",
                extra={
                    "notebooks": len(report.deconstructed_notebooks),
                    "failed_notebooks": len(report.failures),
                },
            )
            return report

    async def reset_stuck_competitions(self, threshold_seconds: Optional[float] = None) -> int:
        """Fail analyses idle longer than ``threshold_seconds`` (default 10 minutes)."""
        threshold = (
            threshold_seconds
            if threshold_seconds is not None
            else self.config.manual_reset_threshold_seconds
        )
        return await self._reset_stuck(threshold)

    async def _reset_stuck(self, threshold_seconds: float) -> int:
        cutoff = self._clock() - timedelta(seconds=threshold_seconds)
        count = await self.competitions.reset_stuck(cutoff, STUCK_ANALYSIS_MESSAGE)
        if count:
            logger.warning(f"Reset {count} stuck analyses (idle > {threshold_seconds:g}s)")
        return count

    # ==================== Background tasks ====================

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            logger.warning(f"Background task {task.get_name()} cancelled")
            return
        error = task.exception()
        if error is not None:
            # Already recorded on the competition by run_analysis
            logger.info(f"Background task {task.get_name()} ended with {type(error).__name__}")

    async def wait_for_background(self) -> None:
        """Wait until every scheduled analysis has finished."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def close(self) -> None:
        """Cancel scheduled analyses; the janitor fails their records later."""
        for task in list(self._background):
            task.cancel()
        await self.wait_for_background()

    # ==================== User settings ====================

    async def save_credentials(self, user_id: str, username: str, key: str) -> UserSettings:
        record = await self.users.save_kaggle_credentials(user_id, username, key)
        logger.info(f"Saved Kaggle credentials for user={user_id}")
        return UserSettings.from_record(record)

    async def get_user(self, user_id: str) -> UserSettings:
        record = await self.users.get(user_id)
        if record is None:
            return UserSettings(id=user_id)
        return UserSettings.from_record(record)

    async def add_interest(self, user_id: str, interest: str) -> UserSettings:
        return UserSettings.from_record(await self.users.add_interest(user_id, interest))

    async def remove_interest(self, user_id: str, interest: str) -> UserSettings:
        record = await self.users.remove_interest(user_id, interest)
        if record is None:
            return UserSettings(id=user_id)
        return UserSettings.from_record(record)

    async def save_progress(
        self,
        user_id: str,
        xp: int,
        level: int,
        competitions_analysed: int,
    ) -> UserSettings:
        record = await self.users.save_progress(user_id, xp, level, competitions_analysed)
        return UserSettings.from_record(record)

    # ==================== Health ====================

    async def health_check(self) -> Dict[str, bool]:
        """Health of Kaggle and, when configured, the LLM provider."""
        checks = {"kaggle": await self.kaggle_api.health_check()}
        if self.llm is not None:
            checks["llm"] = await self.llm.health_check()
        return checks
