"""
Async SQLAlchemy engine and session factory.

PostgreSQL (asyncpg) in production, SQLite (aiosqlite) for development and
tests.  The repositories in ``sitecraft.services`` and
``sitecraft.core.memory.sql_repository`` take the session factory built
here; nothing else opens sessions.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from sitecraft.config import settings

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_URL = "sqlite+aiosqlite:///./sitecraft.db"


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Engine for *url*.

    SQLite connections may be used from any thread; an in-memory SQLite
    database is pinned to a single connection so every session sees the
    same tables.
    """
    kwargs: dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
    return create_async_engine(url, **kwargs)


def session_factory_for(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    from sitecraft.db import models  # noqa: F401  register tables with Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db(database_url: str | None = None) -> None:
    """Create the engine, the session factory and any missing tables."""
    global _engine, _session_factory

    url = database_url or settings.database_url
    if not url:
        url = DEFAULT_SQLITE_URL
        logger.warning(f"No database URL configured, using SQLite: {url}")
    logger.info(f"Initializing database: {url.split('@')[-1]}")

    _engine = create_engine(url, echo=settings.debug)
    _session_factory = session_factory_for(_engine)
    await create_tables(_engine)
    logger.info("Database initialized successfully")


async def close_db() -> None:
    global _engine, _session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connection closed")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
