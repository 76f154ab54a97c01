"""User settings repository."""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.shared.models.user import UserRecord
from src.shared.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[UserRecord]):
    """Repository for per-user settings."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(UserRecord, session_factory)

    async def save_kaggle_credentials(self, user_id: str, username: str, key: str) -> UserRecord:
        logger.info(f"UserRepository: Saving Kaggle credentials for user={user_id}")
        return await self.upsert(user_id, kaggle_username=username, kaggle_key=key)

    async def get_kaggle_credentials(self, user_id: str) -> Optional[tuple]:
        """Return ``(username, key)`` when both are stored, else None."""
        user = await self.get(user_id)
        if user is None or not user.kaggle_username or not user.kaggle_key:
            return None
        return user.kaggle_username, user.kaggle_key

    async def add_interest(self, user_id: str, interest: str) -> UserRecord:
        """Add an interest if not already present (set semantics, order kept)."""
        async with self._session("add_interest") as session:
            user = await session.get(UserRecord, user_id)
            if user is None:
                user = UserRecord(id=user_id, interests=[interest])
                session.add(user)
            elif interest not in (user.interests or []):
                user.interests = [*(user.interests or []), interest]
            await session.flush()
            await session.refresh(user)
            return user

    async def remove_interest(self, user_id: str, interest: str) -> Optional[UserRecord]:
        async with self._session("remove_interest") as session:
            user = await session.get(UserRecord, user_id)
            if user is None:
                return None
            user.interests = [i for i in (user.interests or []) if i != interest]
            await session.flush()
            await session.refresh(user)
            return user

    async def save_progress(
        self,
        user_id: str,
        xp: int,
        level: int,
        competitions_analysed: int,
    ) -> UserRecord:
        return await self.upsert(
            user_id,
            xp=xp,
            level=level,
            competitions_analysed=competitions_analysed,
        )
