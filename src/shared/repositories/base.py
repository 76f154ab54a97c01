"""Generic repository base class with common CRUD operations."""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, List, Optional, Type, TypeVar

from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.shared.exceptions import (
    DatabaseError,
    RepositoryConflictError,
    RepositoryNotFoundError,
)
from src.shared.models.base import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

_SENSITIVE_KEYS = {"password", "token", "api_key", "secret", "kaggle_key"}


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations.

    Each public method runs in its own short transaction opened from the
    injected session factory. Analyses run for minutes, so no session is
    held across awaits on Kaggle or the LLM.
    """

    def __init__(self, model: Type[ModelType], session_factory: async_sessionmaker[AsyncSession]):
        """Initialize repository.

        Args:
            model: SQLAlchemy model class
            session_factory: Factory for async sessions (expire_on_commit=False)
        """
        self.model = model
        self.session_factory = session_factory
        self._model_name = model.__name__
        self._pk_name = inspect(model).primary_key[0].key

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, commit on success and translate SQLAlchemy errors."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.error(f"{self._model_name}: Integrity error during {operation}: {e}")
                raise RepositoryConflictError(
                    f"Failed to {operation} {self._model_name}: constraint violation",
                    original=e,
                ) from e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"{self._model_name}: Database error during {operation}: {e}")
                raise DatabaseError(
                    f"Failed to {operation} {self._model_name}: {e}",
                    original=e,
                ) from e

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get model instance by primary key, or None."""
        logger.debug(f"{self._model_name}: Getting id={id}")
        async with self._session("get") as session:
            return await session.get(self.model, id)

    async def get_or_404(self, id: Any) -> ModelType:
        """Get model instance by primary key.

        Raises:
            RepositoryNotFoundError: If instance not found
        """
        instance = await self.get(id)
        if instance is None:
            raise RepositoryNotFoundError(
                f"{self._model_name} with id={id} not found",
                details={"id": id},
            )
        return instance

    async def get_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ModelType]:
        """Get all model instances with optional pagination."""
        async with self._session("list") as session:
            query = select(self.model)
            if limit is not None:
                query = query.limit(limit)
            if offset is not None:
                query = query.offset(offset)
            result = await session.execute(query)
            return list(result.scalars().all())

    async def upsert(self, id: Any, **fields: Any) -> ModelType:
        """Insert the row or merge ``fields`` into the existing one.

        Fields not named are left untouched on existing rows.
        """
        logger.debug(f"{self._model_name}: Upserting id={id} with {self._sanitize_params(fields)}")
        async with self._session("upsert") as session:
            instance = await session.get(self.model, id)
            if instance is None:
                instance = self.model(**{self._pk_name: id}, **fields)
                session.add(instance)
            else:
                for key, value in fields.items():
                    setattr(instance, key, value)
            await session.flush()
            await session.refresh(instance)
            return instance

    def _sanitize_params(self, params: dict) -> dict:
        """Sanitize parameters for logging (remove sensitive data)."""
        return {
            key: "***REDACTED***" if key.lower() in _SENSITIVE_KEYS else value
            for key, value in params.items()
        }
