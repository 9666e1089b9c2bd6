"""Site state persistence.

``SiteRepository`` loads and stores the ``SiteState`` a command turn works
on.  A site is only visible to its owner: ``get`` with the wrong owner is
indistinguishable from a missing project.
"""
from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sitecraft.db.models import Site
from sitecraft.models.site import SiteState

logger = logging.getLogger(__name__)


class SiteRepository(Protocol):
    async def get(self, project_id: str, owner_id: str) -> SiteState | None: ...

    async def create(self, state: SiteState, owner_id: str, name: str = "") -> SiteState: ...

    async def save(self, state: SiteState) -> None: ...


class InMemorySiteRepository:
    def __init__(self) -> None:
        self._sites: dict[str, tuple[str, SiteState]] = {}

    async def get(self, project_id: str, owner_id: str) -> SiteState | None:
        entry = self._sites.get(project_id)
        if entry is None or entry[0] != owner_id:
            return None
        return entry[1].model_copy(deep=True)

    async def create(self, state: SiteState, owner_id: str, name: str = "") -> SiteState:
        if state.project_id in self._sites:
            raise ValueError(f"Site for project {state.project_id} already exists")
        self._sites[state.project_id] = (owner_id, state.model_copy(deep=True))
        return state

    async def save(self, state: SiteState) -> None:
        entry = self._sites.get(state.project_id)
        if entry is None:
            raise LookupError(f"No site for project {state.project_id}")
        self._sites[state.project_id] = (entry[0], state.model_copy(deep=True))


class SqlSiteRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, project_id: str, owner_id: str) -> SiteState | None:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Site).where(Site.project_id == project_id, Site.owner_id == owner_id)
            )
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return SiteState.model_validate(row.state)

    async def create(self, state: SiteState, owner_id: str, name: str = "") -> SiteState:
        async with self._session_factory() as db:
            db.add(Site(
                project_id=state.project_id,
                site_id=state.site_id,
                owner_id=owner_id,
                name=name,
                state=state.to_wire(),
            ))
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise ValueError(f"Site for project {state.project_id} already exists")
        logger.info(f"Created site {state.site_id} for project {state.project_id}")
        return state

    async def save(self, state: SiteState) -> None:
        async with self._session_factory() as db:
            result = await db.execute(
                update(Site)
                .where(Site.project_id == state.project_id)
                .values(
                    state=state.to_wire(),
                    version=Site.version + 1,
                )
            )
            if result.rowcount == 0:
                raise LookupError(f"No site for project {state.project_id}")
            await db.commit()
        logger.debug(f"Saved site state for project {state.project_id}")
