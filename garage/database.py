"""
Database engine, session factory and declarative base.
"""
from typing import AsyncIterator

from sqlalchemy import Column, DateTime
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import func

from garage.config import get_settings

settings = get_settings()

# aiosqlite connections are bound to the loop that opened them
_engine_kwargs = {"poolclass": NullPool} if settings.database_url.startswith("sqlite") else {}

engine = create_async_engine(settings.database_url, echo=settings.debug, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


class TimestampMixin:
    """Adds created_at / updated_at columns to a model."""

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency that yields a database session.
    The session is closed when the request finishes.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create all tables."""
    import garage.models  # noqa: F401  registers models on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    """Drop all tables."""
    import garage.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
