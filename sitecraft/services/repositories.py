"""The set of repositories the application runs on."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sitecraft.core.memory.repository import (
    InMemoryProjectMemoryRepository,
    InMemorySessionRepository,
    InMemoryUserMemoryRepository,
    ProjectMemoryRepository,
    SessionRepository,
    UserMemoryRepository,
)
from sitecraft.core.memory.sql_repository import (
    SqlProjectMemoryRepository,
    SqlSessionRepository,
    SqlUserMemoryRepository,
)
from sitecraft.services.sites import InMemorySiteRepository, SiteRepository, SqlSiteRepository


@dataclass(frozen=True)
class Repositories:
    sites: SiteRepository
    user_memory: UserMemoryRepository
    project_memory: ProjectMemoryRepository
    sessions: SessionRepository


def sql_repositories(session_factory: async_sessionmaker[AsyncSession]) -> Repositories:
    return Repositories(
        sites=SqlSiteRepository(session_factory),
        user_memory=SqlUserMemoryRepository(session_factory),
        project_memory=SqlProjectMemoryRepository(session_factory),
        sessions=SqlSessionRepository(session_factory),
    )


def in_memory_repositories() -> Repositories:
    return Repositories(
        sites=InMemorySiteRepository(),
        user_memory=InMemoryUserMemoryRepository(),
        project_memory=InMemoryProjectMemoryRepository(),
        sessions=InMemorySessionRepository(),
    )
