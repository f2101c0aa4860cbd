"""Database configuration and session management.

Provides async SQLAlchemy engine and session factory builders.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Base class for models
Base = declarative_base()


def create_engine(database_url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create async engine.

    Args:
        database_url: SQLAlchemy connection URL.
        echo: Whether to log emitted SQL.
        **kwargs: Extra engine options (e.g. poolclass in tests).

    Returns:
        AsyncEngine bound to the URL.
    """
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory for the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables for all registered models.

    Args:
        engine: Engine to create tables on.
    """
    # Register models on Base.metadata
    from catalog_api.infrastructure import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
