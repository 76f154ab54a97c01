"""Database configuration and async engine management."""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


class DatabaseConfig(BaseSettings):
    """Database configuration with connection pooling settings.

    Settings are loaded from ``DB_*`` environment variables (or ``.env``).
    ``DB_URL`` overrides the host/port/user parts entirely, which is how
    tests point the repositories at SQLite.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: Optional[str] = Field(default=None, description="Full SQLAlchemy URL override")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    user: str = Field(default="postgres", description="Database user")
    password: str = Field(default="postgres", description="Database password")
    name: str = Field(default="kaggle_mentor", description="Database name")

    pool_size: int = Field(default=5, description="Number of connections to maintain in pool")
    max_overflow: int = Field(default=10, description="Maximum overflow connections beyond pool_size")
    pool_recycle: int = Field(default=3600, description="Recycle connections after this many seconds")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    pool_pre_ping: bool = Field(default=True, description="Test connections for liveness before use")

    echo: bool = Field(default=False, description="Echo SQL statements (DEBUG mode)")

    @property
    def database_url(self) -> str:
        """Construct async connection URL."""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"

    def create_async_engine(self) -> AsyncEngine:
        """Create configured async engine.

        Pool sizing is skipped for SQLite, whose async driver uses a static pool.
        """
        url = self.database_url
        if url.startswith("sqlite"):
            return create_async_engine(url, echo=self.echo)
        return create_async_engine(
            url,
            echo=self.echo,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_recycle=self.pool_recycle,
            pool_timeout=self.pool_timeout,
            pool_pre_ping=self.pool_pre_ping,
        )


_async_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def get_async_engine(config: Optional[DatabaseConfig] = None) -> AsyncEngine:
    """Get or create the global async engine.

    The engine is created lazily on first call and reused thereafter.
    """
    global _async_engine, _async_session_maker

    if _async_engine is None:
        _async_engine = (config or DatabaseConfig()).create_async_engine()
        _async_session_maker = async_sessionmaker(
            _async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _async_engine


def get_session_factory(config: Optional[DatabaseConfig] = None) -> async_sessionmaker[AsyncSession]:
    """Get or create the global async session factory."""
    if _async_session_maker is None:
        get_async_engine(config)

    return _async_session_maker


async def init_models(engine: Optional[AsyncEngine] = None) -> None:
    """Create all tables registered on ``Base.metadata``."""
    from src.shared.models import Base

    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose of the global engine and session factory.

    Call this when shutting down the application.
    """
    global _async_engine, _async_session_maker

    if _async_engine is not None:
        await _async_engine.dispose()
        _async_engine = None
        _async_session_maker = None
