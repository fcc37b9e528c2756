"""
Database connection setup and session management.
"""
from functools import lru_cache
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from invest_tracker.config import settings


# Declarative Base class
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def to_async_url(database_url: str) -> str:
    """
    Convert a plain database URL to its async driver form.

    postgresql:// -> postgresql+asyncpg://, sqlite:// -> sqlite+aiosqlite://.
    URLs that already name a driver are returned unchanged.
    """
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    url = to_async_url(database_url)
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Asynchronous session factory bound to the given engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Process-wide engine built from settings on first use."""
    return build_engine(settings.database_url)


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Process-wide session factory built on first use."""
    return build_session_factory(get_engine())


# Create all tables (migrations are not shipped; the schema is small and additive)
async def create_tables(engine: AsyncEngine = None):
    """Create all database tables."""
    # Import models so they register on Base.metadata
    from invest_tracker import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

