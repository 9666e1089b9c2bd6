"""Pytest configuration and fixtures."""
import logging

import pytest
import pytest_asyncio

from sitecraft.core.memory.locks import KeyedLocks
from sitecraft.db.database import Base, create_engine, create_tables, session_factory_for
from sitecraft.models.site import (
    SectionContent,
    SectionType,
    SiteMeta,
    SiteState,
    SiteStyles,
)
from sitecraft.services.repositories import Repositories, in_memory_repositories


def pytest_configure(config):
    """Ensure asyncio_mode is auto so async fixtures work when pyproject is not in cwd."""
    if hasattr(config.option, "asyncio_mode") and config.option.asyncio_mode is None:
        config.option.asyncio_mode = "auto"
    logging.getLogger("httpcore").setLevel(logging.CRITICAL)


@pytest_asyncio.fixture
async def session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield session_factory_for(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def locks() -> KeyedLocks:
    """A private lock table so tests never share locks with each other."""
    return KeyedLocks()


@pytest.fixture
def repositories() -> Repositories:
    return in_memory_repositories()


# -----------------------------------------------------------------------------
# Site fixtures
# -----------------------------------------------------------------------------

def _make_site(*section_types: SectionType, project_id: str = "proj-1") -> SiteState:
    """A site with one section per type, ids ``<type>-1``."""
    return SiteState(
        project_id=project_id,
        site_id=f"site-{project_id}",
        sections=[
            SectionContent(id=f"{t.value}-1", type=t, title=t.value.title())
            for t in section_types
        ],
        styles=SiteStyles(primary_color="#2563eb", secondary_color="#1e293b"),
        meta=SiteMeta(title="Acme Bakery", description="Fresh bread every morning"),
    )


@pytest.fixture
def site_state() -> SiteState:
    """hero, features, pricing, contact."""
    return _make_site(
        SectionType.HERO,
        SectionType.FEATURES,
        SectionType.PRICING,
        SectionType.CONTACT,
    )


@pytest.fixture
def site_without_pricing() -> SiteState:
    return _make_site(SectionType.HERO, SectionType.FEATURES, SectionType.CONTACT)


@pytest.fixture
def make_site():
    """Factory for sites with one section per given type."""
    return _make_site
