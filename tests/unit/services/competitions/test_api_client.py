"""Tests for KaggleAPIClient using httpx.MockTransport."""
import base64
import json

import httpx
import pytest

from src.services.competitions.config import CompetitionServiceConfig
from src.services.competitions.exceptions import (
    INVALID_CREDENTIALS_MESSAGE,
    MISSING_CREDENTIALS_MESSAGE,
    CredentialsNotFoundError,
    KaggleAuthError,
    NotebookDownloadError,
    NotebookSourceMissingError,
)
from src.services.competitions.schemas import KaggleCredentials
from src.services.competitions.services.api_client import (
    FALLBACK_COMPETITIONS,
    KaggleAPIClient,
    notebook_file_stem,
    title_from_slug,
)
from src.services.competitions.services.credentials import CredentialResolver
from tests.factories import simple_notebook


CREDS = KaggleCredentials(username="alice", key="secret-key")


def make_client(handler, environ=None, **config):
    config.setdefault("max_retries", 1)
    config.setdefault("base_delay_seconds", 0)
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    resolver = CredentialResolver(environ=environ if environ is not None else {})
    return KaggleAPIClient(
        credential_resolver=resolver,
        config=CompetitionServiceConfig(**config),
        http_client=http,
    )


class Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


# ==================== Helpers ====================

def test_title_from_slug():
    assert title_from_slug("house-prices-advanced") == "House Prices Advanced"


def test_notebook_file_stem():
    assert notebook_file_stem("alice/titanic-eda") == "titanic-eda"
    assert notebook_file_stem("lonely") == "lonely"


# ==================== list_competitions ====================

@pytest.mark.asyncio
async def test_list_competitions_maps_fields_and_sends_basic_auth():
    handler = Recorder(httpx.Response(200, json=[
        {"id": "titanic", "title": "Titanic", "url": "https://www.kaggle.com/c/titanic", "reward": "Knowledge"},
        {"id": "house-prices", "reward": "$25,000"},
        {"title": "no id, skipped"},
    ]))
    client = make_client(handler)

    result = await client.list_competitions(CREDS)

    assert not result.degraded
    assert [c.id for c in result.value] == ["titanic", "house-prices"]
    second = result.value[1]
    assert second.title == "House Prices"
    assert second.url == "https://www.kaggle.com/c/house-prices"
    assert second.prize == "$25,000"
    assert second.status == "active"

    request = handler.requests[0]
    assert request.url.path == "/api/v1/competitions/list"
    assert request.url.params["sortBy"] == "latestDeadline"
    expected = base64.b64encode(b"alice:secret-key").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


@pytest.mark.asyncio
async def test_list_competitions_truncates_to_limit():
    handler = Recorder(httpx.Response(200, json=[{"id": f"comp-{i}"} for i in range(60)]))
    client = make_client(handler)

    result = await client.list_competitions(CREDS)

    assert len(result.value) == 50


@pytest.mark.asyncio
async def test_list_competitions_falls_back_on_server_error():
    client = make_client(Recorder(httpx.Response(500)))

    result = await client.list_competitions(CREDS)

    assert result.degraded
    assert [c.id for c in result.value] == [slug for slug, _, _ in FALLBACK_COMPETITIONS]
    assert client.get_stats()["fallbacks"] == 1


@pytest.mark.asyncio
async def test_list_competitions_falls_back_on_rejected_credentials():
    client = make_client(Recorder(httpx.Response(401)))

    result = await client.list_competitions(CREDS)

    assert result.degraded
    assert result.reason == INVALID_CREDENTIALS_MESSAGE
    assert len(result.value) == 5


@pytest.mark.asyncio
async def test_list_competitions_without_credentials_falls_back_without_request():
    handler = Recorder(httpx.Response(200, json=[]))
    client = make_client(handler)

    result = await client.list_competitions()

    assert result.degraded
    assert result.reason == MISSING_CREDENTIALS_MESSAGE
    assert handler.requests == []


@pytest.mark.asyncio
async def test_environment_credentials_are_used_when_none_given():
    handler = Recorder(httpx.Response(200, json=[]))
    client = make_client(handler, environ={"KAGGLE_USERNAME": "ops", "KAGGLE_KEY": "k"})

    result = await client.list_competitions()

    assert not result.degraded
    expected = base64.b64encode(b"ops:k").decode()
    assert handler.requests[0].headers["Authorization"] == f"Basic {expected}"


@pytest.mark.asyncio
async def test_non_list_payload_falls_back():
    client = make_client(Recorder(httpx.Response(200, json={"error": "weird"})))

    result = await client.list_competitions(CREDS)

    assert result.degraded


@pytest.mark.asyncio
async def test_numeric_listing_fields_are_coerced_to_text():
    client = make_client(Recorder(httpx.Response(200, json=[
        {"id": "titanic", "title": "Titanic", "reward": 25000},
        {"id": 3136, "title": 42},
    ])))

    result = await client.list_competitions(CREDS)

    assert not result.degraded
    titanic, numeric = result.value
    assert titanic.prize == "25000"
    assert (numeric.id, numeric.title, numeric.prize) == ("3136", "42", "Knowledge")
    assert numeric.url.endswith("/c/3136")


# ==================== list_top_notebooks ====================

@pytest.mark.asyncio
async def test_list_top_notebooks_queries_python_by_votes():
    handler = Recorder(httpx.Response(200, json=[{"ref": "alice/eda"}, {"ref": ""}, {"title": "no ref"}, {"ref": "bob/xgb"}]))
    client = make_client(handler)

    result = await client.list_top_notebooks("titanic", CREDS)

    assert result.value == ["alice/eda", "bob/xgb"]
    params = handler.requests[0].url.params
    assert handler.requests[0].url.path == "/api/v1/kernels/list"
    assert params["competition"] == "titanic"
    assert params["language"] == "python"
    assert params["sort_by"] == "vote_count"
    assert params["page_size"] == "10"


@pytest.mark.asyncio
async def test_list_top_notebooks_caps_results():
    handler = Recorder(httpx.Response(200, json=[{"ref": f"u/nb-{i}"} for i in range(25)]))
    client = make_client(handler)

    result = await client.list_top_notebooks("titanic", CREDS)

    assert len(result.value) == 10


@pytest.mark.asyncio
async def test_list_top_notebooks_404_is_empty_not_degraded():
    client = make_client(Recorder(httpx.Response(404)))

    result = await client.list_top_notebooks("missing", CREDS)

    assert result.value == []
    assert not result.degraded


@pytest.mark.asyncio
async def test_list_top_notebooks_other_errors_are_degraded():
    client = make_client(Recorder(httpx.Response(403, text="forbidden")))

    result = await client.list_top_notebooks("titanic", CREDS)

    assert result.value == []
    assert result.degraded


# ==================== fetch_notebook ====================

@pytest.mark.asyncio
async def test_fetch_notebook_returns_source():
    body = simple_notebook()
    handler = Recorder(httpx.Response(200, json={"metadata": {"ref": "alice/titanic-eda"}, "blob": {"source": body}}))
    client = make_client(handler)

    notebook = await client.fetch_notebook("alice/titanic-eda", CREDS)

    assert notebook.ref == "alice/titanic-eda"
    assert notebook.file_name == "titanic-eda.ipynb"
    assert notebook.content == body
    assert handler.requests[0].url.params["kernel"] == "alice/titanic-eda"
    assert client.get_stats()["downloads"] == 1


@pytest.mark.asyncio
async def test_fetch_notebook_reads_top_level_source():
    client = make_client(Recorder(httpx.Response(200, json={"source": "{}"})))

    notebook = await client.fetch_notebook("alice/x", CREDS)

    assert notebook.content == "{}"


@pytest.mark.asyncio
async def test_fetch_notebook_without_source_raises():
    client = make_client(Recorder(httpx.Response(200, json={"metadata": {}})))

    with pytest.raises(NotebookSourceMissingError) as exc_info:
        await client.fetch_notebook("alice/x", CREDS)

    assert exc_info.value.message == "Failed to download notebook: No notebook source found in API response"


@pytest.mark.asyncio
async def test_fetch_notebook_401_raises_auth_error():
    client = make_client(Recorder(httpx.Response(401)))

    with pytest.raises(KaggleAuthError) as exc_info:
        await client.fetch_notebook("alice/x", CREDS)

    assert exc_info.value.message == INVALID_CREDENTIALS_MESSAGE


@pytest.mark.asyncio
async def test_fetch_notebook_other_failures_raise_download_error():
    client = make_client(Recorder(httpx.Response(404)))

    with pytest.raises(NotebookDownloadError) as exc_info:
        await client.fetch_notebook("alice/x", CREDS)

    assert exc_info.value.notebook_ref == "alice/x"


@pytest.mark.asyncio
async def test_fetch_notebook_without_credentials_raises_before_request():
    handler = Recorder(httpx.Response(200, json={"source": "{}"}))
    client = make_client(handler)

    with pytest.raises(CredentialsNotFoundError):
        await client.fetch_notebook("alice/x")

    assert handler.requests == []


@pytest.mark.asyncio
async def test_invalid_json_raises_download_error():
    client = make_client(Recorder(httpx.Response(200, text="<html>maintenance</html>")))

    with pytest.raises(NotebookDownloadError):
        await client.fetch_notebook("alice/x", CREDS)


# ==================== Retries ====================

@pytest.mark.asyncio
async def test_transient_errors_are_retried():
    handler = Recorder(
        httpx.Response(503),
        httpx.ConnectError("connection reset"),
        httpx.Response(200, json={"source": "{}"}),
    )
    client = make_client(handler, max_retries=3)

    notebook = await client.fetch_notebook("alice/x", CREDS)

    assert notebook.content == "{}"
    assert len(handler.requests) == 3


@pytest.mark.asyncio
async def test_client_errors_are_not_retried():
    handler = Recorder(httpx.Response(400), httpx.Response(200, json={"source": "{}"}))
    client = make_client(handler, max_retries=3)

    with pytest.raises(NotebookDownloadError):
        await client.fetch_notebook("alice/x", CREDS)

    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_retries_give_up_after_max_attempts():
    handler = Recorder(httpx.Response(502))
    client = make_client(handler, max_retries=2)

    with pytest.raises(NotebookDownloadError) as exc_info:
        await client.fetch_notebook("alice/x", CREDS)

    assert exc_info.value.status_code == 502
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_health_check_reflects_degradation():
    assert await make_client(Recorder(httpx.Response(200, json=[])), environ={"KAGGLE_USERNAME": "u", "KAGGLE_KEY": "k"}).health_check()
    assert not await make_client(Recorder(httpx.Response(500))).health_check()
