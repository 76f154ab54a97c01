"""Shared utilities module."""

from src.shared.utils.retry import calculate_backoff, retry

__all__ = [
    "calculate_backoff",
    "retry",
]
