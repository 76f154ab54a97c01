"""Unit tests for the retry decorator and backoff calculation."""
import pytest

from src.shared.exceptions import APIClientError, APIServerError
from src.shared.utils.retry import calculate_backoff, retry


def test_exponential_backoff_calculates_correctly():
    """Should calculate correct backoff values (with jitter tolerance)."""
    # base * (2 ^ attempt) with ±25% jitter
    backoff_0 = calculate_backoff(0, base_seconds=1.0)  # 1.0 ± 0.25
    backoff_1 = calculate_backoff(1, base_seconds=1.0)  # 2.0 ± 0.5
    backoff_2 = calculate_backoff(2, base_seconds=1.0)  # 4.0 ± 1.0

    assert 0.75 <= backoff_0 <= 1.25
    assert 1.5 <= backoff_1 <= 2.5
    assert 3.0 <= backoff_2 <= 5.0


def test_exponential_backoff_caps_at_max():
    """Should cap backoff at max_seconds."""
    backoff = calculate_backoff(9, base_seconds=1.0, max_seconds=10.0, jitter_percent=0)

    assert backoff == 10.0


def test_zero_base_gives_no_delay():
    assert calculate_backoff(3, base_seconds=0) == 0.0


@pytest.mark.asyncio
async def test_retries_until_success():
    calls = []

    @retry(max_attempts=3, backoff_base=0)
    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise RuntimeError("transient")
        return "ok"

    assert await flaky() == "ok"
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_raises_after_max_attempts():
    calls = []

    @retry(max_attempts=2, backoff_base=0)
    async def always_fails():
        calls.append(1)
        raise RuntimeError("still broken")

    with pytest.raises(RuntimeError):
        await always_fails()

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_retry_on_limits_exception_types():
    calls = []

    @retry(max_attempts=3, backoff_base=0, retry_on=(ConnectionError,))
    async def wrong_kind():
        calls.append(1)
        raise ValueError("permanent")

    with pytest.raises(ValueError):
        await wrong_kind()

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_retry_if_predicate():
    """Only errors the predicate accepts are retried."""
    calls = []

    @retry(max_attempts=3, backoff_base=0, retry_if=lambda e: e.is_transient)
    async def call(error):
        calls.append(1)
        raise error

    with pytest.raises(APIClientError):
        await call(APIClientError("bad request", status_code=400))
    assert len(calls) == 1

    calls.clear()
    with pytest.raises(APIServerError):
        await call(APIServerError("unavailable", status_code=503))
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_attempts_can_come_from_instance_config():
    class Client:
        attempts = 4

        def __init__(self):
            self.calls = 0

        @retry(max_attempts=lambda self: self.attempts, backoff_base=lambda self: 0)
        async def fetch(self):
            self.calls += 1
            raise RuntimeError("down")

    client = Client()
    with pytest.raises(RuntimeError):
        await client.fetch()

    assert client.calls == 4
