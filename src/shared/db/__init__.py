"""Database engine and session management."""

from src.shared.db.config import (
    DatabaseConfig,
    dispose_engine,
    get_async_engine,
    get_session_factory,
    init_models,
)
from src.shared.db.health import quick_check

__all__ = [
    "DatabaseConfig",
    "dispose_engine",
    "get_async_engine",
    "get_session_factory",
    "init_models",
    "quick_check",
]
