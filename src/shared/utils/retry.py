"""Retry utilities with exponential backoff and jitter."""
import asyncio
import functools
import logging
import random
from typing import Callable, Optional, Tuple, Type


logger = logging.getLogger(__name__)


def calculate_backoff(
    attempt: int,
    base_seconds: float = 1.0,
    factor: float = 2.0,
    max_seconds: float = 30.0,
    jitter_percent: float = 0.25,
) -> float:
    """Calculate exponential backoff delay with random jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        base_seconds: Base delay for first retry
        factor: Exponential factor
        max_seconds: Maximum delay
        jitter_percent: Jitter percentage (0.0-1.0)

    Returns:
        Delay in seconds
    """
    delay = min(base_seconds * (factor ** attempt), max_seconds)

    if jitter_percent > 0:
        jitter = delay * jitter_percent
        delay = delay + random.uniform(-jitter, jitter)

    return max(0.0, delay)


def retry(
    max_attempts: int = 3,
    backoff_factor: float = 2.0,
    backoff_base: float = 1.0,
    max_backoff_seconds: float = 30.0,
    jitter_percent: float = 0.25,
    retry_on: Optional[Tuple[Type[BaseException], ...]] = None,
    retry_if: Optional[Callable[[Exception], bool]] = None,
):
    """Decorator retrying an async function with exponential backoff.

    ``max_attempts`` and ``backoff_base`` may also be callables taking the
    bound ``self`` so that instance configuration is read at call time.

    Args:
        max_attempts: Maximum number of attempts (including first)
        backoff_factor: Exponential factor for delay calculation
        backoff_base: Base delay in seconds
        max_backoff_seconds: Maximum delay between attempts
        jitter_percent: Jitter percentage (0.0 = no jitter)
        retry_on: Exception types to retry on. If None, retry on all exceptions.
        retry_if: Extra predicate; an exception is retried only if it returns True

    Example:
        @retry(max_attempts=3, retry_on=(APITimeoutError, APIConnectionError))
        async def call_external_api():
            return await api_client.fetch()
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempts = max_attempts(args[0]) if callable(max_attempts) else max_attempts
            attempts = max(1, attempts)
            base = backoff_base(args[0]) if callable(backoff_base) else backoff_base

            for attempt in range(attempts):
                if attempt > 0:
                    delay = calculate_backoff(
                        attempt=attempt - 1,
                        base_seconds=base,
                        factor=backoff_factor,
                        max_seconds=max_backoff_seconds,
                        jitter_percent=jitter_percent,
                    )
                    logger.debug(
                        f"Retrying {func.__name__} (attempt {attempt + 1}/{attempts})",
                        extra={"function": func.__name__, "delay_seconds": round(delay, 2)},
                    )
                    await asyncio.sleep(delay)

                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    retryable = retry_on is None or isinstance(e, retry_on)
                    if retryable and retry_if is not None:
                        retryable = retry_if(e)
                    if not retryable or attempt == attempts - 1:
                        raise

                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt + 1}/{attempts}): {type(e).__name__}",
                        extra={
                            "function": func.__name__,
                            "attempt": attempt + 1,
                            "exception_message": str(e),
                        },
                    )

        return wrapper

    return decorator
