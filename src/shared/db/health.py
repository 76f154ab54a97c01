"""Database health check functionality."""
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


async def quick_check(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    """Return True if a trivial query succeeds."""
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False
