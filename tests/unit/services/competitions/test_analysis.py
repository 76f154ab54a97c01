"""Tests for AnalysisService: listing cache, lease, timeout, janitor and settings."""
from datetime import datetime, timedelta, timezone

import pytest

from src.shared.llm import StructuredLLM
from src.shared.models.competition import (
    INGESTION_COMPLETE,
    INGESTION_FAILED,
    INGESTION_PENDING,
    INGESTION_PROCESSING,
)
from src.shared.testing import (
    InMemoryCompetitionListCacheRepository,
    InMemoryCompetitionRepository,
    InMemoryUserRepository,
    ScriptedLLMClient,
)
from src.services.competitions.config import CompetitionServiceConfig
from src.services.competitions.exceptions import (
    INVALID_CREDENTIALS_MESSAGE,
    AnalysisInProgressError,
    AnalysisTimeoutError,
    CompetitionNotFoundError,
    CredentialsNotFoundError,
    KaggleAuthError,
    NotebookDownloadError,
)
from src.services.competitions.schemas import Competition, FetchResult, IngestionStatus
from src.services.competitions.services.analysis import (
    GLOBAL_CACHE_KEY,
    STUCK_ANALYSIS_MESSAGE,
    UNKNOWN_FAILURE_MESSAGE,
    AnalysisService,
)
from src.services.competitions.services.credentials import CredentialResolver
from src.services.competitions.services.parser import NotebookParser
from src.services.competitions.services.pipeline import NO_PROCESSED_SUMMARY, IngestionPipeline
from src.services.competitions.services.tagger import CellTagger
from tests.factories import (
    FakeKaggleAPI,
    create_competition_record,
    simple_notebook,
    summary_reply,
    tag_reply,
)


def llm_reply(prompt: str) -> str:
    if "Competition context:" in prompt:
        return summary_reply("Predict survival on the Titanic.")
    return tag_reply(2)


def ago(**kwargs) -> datetime:
    return datetime.now(timezone.utc) - timedelta(**kwargs)


class Harness:
    """AnalysisService wired to in-memory stores and a fake Kaggle."""

    def __init__(self, kaggle=None, environ=None, **config):
        self.config = CompetitionServiceConfig(**config)
        self.kaggle = kaggle or FakeKaggleAPI(notebooks={"alice/titanic-eda": simple_notebook()})
        self.competitions = InMemoryCompetitionRepository()
        self.list_cache = InMemoryCompetitionListCacheRepository()
        self.users = InMemoryUserRepository()
        self.llm_client = ScriptedLLMClient(default=llm_reply)
        llm = StructuredLLM(self.llm_client, model="mock-model")
        resolver = CredentialResolver(user_repository=self.users, environ=environ or {})
        self.service = AnalysisService(
            competitions=self.competitions,
            list_cache=self.list_cache,
            users=self.users,
            credential_resolver=resolver,
            kaggle_api=self.kaggle,
            pipeline=IngestionPipeline(
                kaggle_api=self.kaggle,
                parser=NotebookParser(),
                tagger=CellTagger(llm),
                llm=llm,
                config=self.config,
            ),
            config=self.config,
            llm=llm,
        )

    def add(self, **fields):
        record = create_competition_record(**fields)
        self.competitions.records[record.id] = record
        return record


LISTING = FetchResult.ok([
    Competition(id="titanic", title="Titanic", url="https://www.kaggle.com/c/titanic"),
    Competition(id="digit-recognizer", title="Digit Recognizer", url="https://www.kaggle.com/c/digit-recognizer"),
])


# ==================== Listing refresh and cache ====================

@pytest.mark.asyncio
async def test_refresh_requires_credentials():
    harness = Harness(kaggle=FakeKaggleAPI(competitions=LISTING))

    with pytest.raises(CredentialsNotFoundError):
        await harness.service.refresh_competitions("user-1")


@pytest.mark.asyncio
async def test_refresh_stores_listing_and_keeps_analyses():
    harness = Harness(kaggle=FakeKaggleAPI(competitions=LISTING))
    await harness.users.save_kaggle_credentials("user-1", "alice", "key")
    harness.add(id="titanic", title="Old title", ingestion_status=INGESTION_COMPLETE, ingestion_summary="kept")

    result = await harness.service.refresh_competitions("user-1")

    assert not result.degraded
    assert harness.kaggle.credentials_seen[0].username == "alice"
    titanic = harness.competitions.records["titanic"]
    assert titanic.title == "Titanic"
    assert titanic.ingestion_summary == "kept"
    assert "digit-recognizer" in harness.competitions.records
    snapshot = await harness.list_cache.get_snapshot(GLOBAL_CACHE_KEY)
    assert [c["id"] for c in snapshot.competitions] == ["titanic", "digit-recognizer"]


@pytest.mark.asyncio
async def test_degraded_refresh_is_returned_but_not_cached():
    harness = Harness(kaggle=FakeKaggleAPI())
    await harness.users.save_kaggle_credentials("user-1", "alice", "key")

    result = await harness.service.refresh_competitions("user-1")

    assert result.degraded
    assert len(result.value) == 5
    assert await harness.list_cache.get_snapshot(GLOBAL_CACHE_KEY) is None
    assert harness.competitions.records == {}


@pytest.mark.asyncio
async def test_cached_competitions_include_analysis_state():
    harness = Harness(kaggle=FakeKaggleAPI(competitions=LISTING), environ={"KAGGLE_USERNAME": "u", "KAGGLE_KEY": "k"})
    await harness.service.refresh_competitions("user-1")
    await harness.competitions.mark_complete("titanic", "Predict survival", [])

    listing = await harness.service.get_cached_competitions()

    assert [c.id for c in listing] == ["titanic", "digit-recognizer"]
    assert listing[0].ingestion_data.status == IngestionStatus.COMPLETE
    assert listing[0].ingestion_data.summary == "Predict survival"
    assert listing[1].ingestion_data is None


@pytest.mark.asyncio
async def test_missing_or_stale_cache_is_empty():
    harness = Harness()
    assert await harness.service.get_cached_competitions() == []

    snapshot = await harness.list_cache.save_snapshot(GLOBAL_CACHE_KEY, [{"id": "titanic", "title": "T", "url": "u"}])
    snapshot.last_refresh = ago(days=8)

    assert await harness.service.get_cached_competitions() == []


@pytest.mark.asyncio
async def test_listing_runs_the_stuck_analysis_janitor():
    harness = Harness()
    harness.add(id="stuck", ingestion_status=INGESTION_PROCESSING, last_updated=ago(minutes=16))
    harness.add(id="pending", ingestion_status=INGESTION_PENDING, last_updated=ago(minutes=20))
    harness.add(id="running", ingestion_status=INGESTION_PROCESSING, last_updated=ago(minutes=5))
    harness.add(id="done", ingestion_status=INGESTION_COMPLETE, last_updated=ago(days=3))

    await harness.service.get_cached_competitions()

    records = harness.competitions.records
    assert records["stuck"].ingestion_status == INGESTION_FAILED
    assert records["stuck"].ingestion_error == STUCK_ANALYSIS_MESSAGE
    assert records["pending"].ingestion_status == INGESTION_FAILED
    assert records["running"].ingestion_status == INGESTION_PROCESSING
    assert records["done"].ingestion_status == INGESTION_COMPLETE


@pytest.mark.asyncio
async def test_manual_reset_uses_ten_minute_threshold():
    harness = Harness()
    harness.add(id="eleven", ingestion_status=INGESTION_PROCESSING, last_updated=ago(minutes=11))
    harness.add(id="nine", ingestion_status=INGESTION_PROCESSING, last_updated=ago(minutes=9))

    assert await harness.service.reset_stuck_competitions() == 1
    assert harness.competitions.records["nine"].ingestion_status == INGESTION_PROCESSING
    assert await harness.service.reset_stuck_competitions(threshold_seconds=60) == 1


@pytest.mark.asyncio
async def test_zero_threshold_resets_every_active_analysis():
    harness = Harness()
    harness.add(id="running", ingestion_status=INGESTION_PROCESSING, last_updated=ago(seconds=5))
    harness.add(id="queued", ingestion_status=INGESTION_PENDING, last_updated=ago(seconds=5))
    harness.add(id="done", ingestion_status=INGESTION_COMPLETE, last_updated=ago(seconds=5))

    assert await harness.service.reset_stuck_competitions(threshold_seconds=0) == 2
    assert harness.competitions.records["running"].ingestion_status == INGESTION_FAILED
    assert harness.competitions.records["done"].ingestion_status == INGESTION_COMPLETE


# ==================== Analysis runs ====================

@pytest.mark.asyncio
async def test_run_analysis_stores_results():
    harness = Harness(environ={"KAGGLE_USERNAME": "u", "KAGGLE_KEY": "k"})
    harness.add(id="titanic", ingestion_status=INGESTION_FAILED, ingestion_error="old error")

    report = await harness.service.run_analysis("user-1", "titanic")

    record = harness.competitions.records["titanic"]
    assert record.ingestion_status == INGESTION_COMPLETE
    assert record.ingestion_summary == "Predict survival on the Titanic."
    assert record.ingestion_error is None
    assert record.ingestion_notebooks[0]["title"] == "titanic eda"
    assert record.ingestion_notebooks[0]["cells"][1]["signal"] == "medium"
    assert report.summary == record.ingestion_summary

    competition = await harness.service.get_competition("titanic")
    assert competition.ingestion_data.deconstructed_notebooks[0].author == "alice"


@pytest.mark.asyncio
async def test_run_analysis_passes_user_credentials():
    harness = Harness()
    await harness.users.save_kaggle_credentials("user-1", "alice", "key")
    harness.add(id="titanic")

    await harness.service.run_analysis("user-1", "titanic")

    assert harness.kaggle.credentials_seen[0].username == "alice"


@pytest.mark.asyncio
async def test_run_analysis_unknown_competition():
    with pytest.raises(CompetitionNotFoundError):
        await Harness().service.run_analysis("user-1", "nope")


@pytest.mark.asyncio
async def test_fresh_lease_blocks_second_analysis():
    harness = Harness()
    harness.add(id="titanic", ingestion_status=INGESTION_PROCESSING, last_updated=ago(minutes=1))

    with pytest.raises(AnalysisInProgressError):
        await harness.service.run_analysis("user-1", "titanic")

    assert harness.llm_client.call_count == 0


@pytest.mark.asyncio
async def test_stale_lease_can_be_taken_over():
    harness = Harness()
    harness.add(id="titanic", ingestion_status=INGESTION_PROCESSING, last_updated=ago(minutes=30))

    await harness.service.run_analysis("user-1", "titanic")

    assert harness.competitions.records["titanic"].ingestion_status == INGESTION_COMPLETE


@pytest.mark.asyncio
async def test_timeout_marks_failed():
    harness = Harness(
        kaggle=FakeKaggleAPI(notebooks={"alice/slow": simple_notebook()}, fetch_delay=2),
        analysis_timeout_seconds=0.05,
    )
    harness.add(id="titanic")

    with pytest.raises(AnalysisTimeoutError) as exc_info:
        await harness.service.run_analysis("user-1", "titanic")

    record = harness.competitions.records["titanic"]
    assert record.ingestion_status == INGESTION_FAILED
    assert record.ingestion_error == exc_info.value.message
    assert record.ingestion_error.startswith("Analysis timeout after")


def test_default_timeout_message():
    assert AnalysisTimeoutError(600).message == "Analysis timeout after 10 minutes"


class RejectingKaggleAPI(FakeKaggleAPI):
    async def list_top_notebooks(self, competition_slug, credentials=None):
        raise NotebookDownloadError("401 Unauthorized", notebook_ref=competition_slug)


@pytest.mark.asyncio
async def test_rejected_notebooks_still_complete():
    harness = Harness(kaggle=FakeKaggleAPI(notebooks={"alice/nb": KaggleAuthError()}))
    harness.add(id="titanic")

    report = await harness.service.run_analysis("user-1", "titanic")

    record = harness.competitions.records["titanic"]
    assert record.ingestion_status == INGESTION_COMPLETE
    assert record.ingestion_summary == NO_PROCESSED_SUMMARY
    assert record.ingestion_error is None
    assert report.failures[0].error_type == "KaggleAuthError"


@pytest.mark.asyncio
async def test_auth_failure_is_recorded_with_remediation():
    harness = Harness(kaggle=RejectingKaggleAPI())
    harness.add(id="titanic")

    with pytest.raises(KaggleAuthError):
        await harness.service.run_analysis("user-1", "titanic")

    record = harness.competitions.records["titanic"]
    assert record.ingestion_status == INGESTION_FAILED
    assert record.ingestion_error == INVALID_CREDENTIALS_MESSAGE


class ExplodingKaggleAPI(FakeKaggleAPI):
    async def list_top_notebooks(self, competition_slug, credentials=None):
        raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_unexpected_error_is_recorded_generically():
    harness = Harness(kaggle=ExplodingKaggleAPI())
    harness.add(id="titanic")

    with pytest.raises(RuntimeError):
        await harness.service.run_analysis("user-1", "titanic")

    record = harness.competitions.records["titanic"]
    assert record.ingestion_status == INGESTION_FAILED
    assert record.ingestion_error == UNKNOWN_FAILURE_MESSAGE


# ==================== Custom competitions ====================

@pytest.mark.asyncio
async def test_submit_custom_competition_runs_in_background():
    harness = Harness(environ={"KAGGLE_USERNAME": "u", "KAGGLE_KEY": "k"})

    competition = await harness.service.submit_custom_competition(
        "user-1", "https://www.kaggle.com/competitions/spaceship-titanic"
    )

    assert competition.id == "spaceship-titanic"
    assert competition.title == "Custom: spaceship-titanic"
    assert competition.prize == "N/A"
    assert competition.status == "Custom"
    assert competition.ingestion_data.status == IngestionStatus.PENDING

    await harness.service.wait_for_background()

    record = harness.competitions.records["spaceship-titanic"]
    assert record.ingestion_status == INGESTION_COMPLETE
    assert record.url == "https://www.kaggle.com/competitions/spaceship-titanic"


@pytest.mark.asyncio
async def test_background_failure_is_recorded():
    harness = Harness(kaggle=ExplodingKaggleAPI())

    await harness.service.submit_custom_competition("user-1", "https://www.kaggle.com/c/titanic")
    await harness.service.wait_for_background()

    assert harness.competitions.records["titanic"].ingestion_status == INGESTION_FAILED


@pytest.mark.asyncio
async def test_submit_while_processing_is_rejected():
    harness = Harness()
    harness.add(id="titanic", ingestion_status=INGESTION_PROCESSING, last_updated=ago(minutes=2))

    with pytest.raises(AnalysisInProgressError):
        await harness.service.submit_custom_competition("user-1", "https://www.kaggle.com/c/titanic")


@pytest.mark.asyncio
async def test_submit_after_lease_taken_keeps_running_analysis():
    harness = Harness()
    harness.add(id="titanic", ingestion_status=INGESTION_COMPLETE, ingestion_summary="Old summary.")
    assert await harness.competitions.try_begin_analysis("titanic", stale_before=ago(minutes=10))

    with pytest.raises(AnalysisInProgressError):
        await harness.service.submit_custom_competition("user-1", "https://www.kaggle.com/c/titanic")

    record = harness.competitions.records["titanic"]
    assert record.ingestion_status == INGESTION_PROCESSING
    assert record.title != "Custom: titanic"
    await harness.service.wait_for_background()
    assert harness.llm_client.call_count == 0


@pytest.mark.asyncio
async def test_get_competition_unknown():
    with pytest.raises(CompetitionNotFoundError):
        await Harness().service.get_competition("nope")


# ==================== User settings ====================

@pytest.mark.asyncio
async def test_user_settings_round_trip():
    service = Harness().service

    assert (await service.get_user("user-1")).level == 1

    settings = await service.save_credentials("user-1", "alice", "secret")
    assert settings.kaggle_username == "alice"
    assert settings.has_kaggle_key
    assert "secret" not in settings.model_dump_json()

    await service.add_interest("user-1", "computer vision")
    settings = await service.add_interest("user-1", "time series")
    assert settings.interests == ["computer vision", "time series"]

    settings = await service.remove_interest("user-1", "computer vision")
    assert settings.interests == ["time series"]

    settings = await service.save_progress("user-1", xp=120, level=2, competitions_analysed=3)
    assert (settings.xp, settings.level, settings.competitions_analysed) == (120, 2, 3)


@pytest.mark.asyncio
async def test_health_check_reports_components():
    harness = Harness(kaggle=FakeKaggleAPI(competitions=LISTING))

    assert await harness.service.health_check() == {"kaggle": True, "llm": True}
