"""Project-tier memory: what the AI knows about one website project."""
from __future__ import annotations

import logging
from typing import Callable, Iterable

from pydantic import JsonValue

from sitecraft.core.errors import MemoryNotFoundError
from sitecraft.core.memory.locks import KeyedLocks, memory_locks, write_versioned
from sitecraft.core.memory.models import (
    MAX_CONTENT_VERSIONS_PER_SECTION,
    MAX_DESIGN_DECISIONS,
    BusinessDetails,
    ContentVersion,
    DesignDecision,
    DesignDecisionType,
    DiscoveredInfo,
    GoalPriority,
    GoalStatus,
    ProjectMemoryData,
    SiteGoal,
)
from sitecraft.core.memory.repository import ProjectMemoryRepository

logger = logging.getLogger(__name__)


class ProjectMemoryStore:
    def __init__(
        self,
        project_id: str,
        repository: ProjectMemoryRepository,
        locks: KeyedLocks = memory_locks,
    ) -> None:
        self.project_id = project_id
        self._repository = repository
        self._locks = locks

    @property
    def _key(self) -> str:
        return f"project:{self.project_id}"

    async def get_memory(self) -> ProjectMemoryData:
        record = await self._repository.get(self.project_id)
        return record if record is not None else ProjectMemoryData(project_id=self.project_id)

    async def _write(self, mutate: Callable[[ProjectMemoryData], None]) -> ProjectMemoryData:
        return await write_versioned(
            self._key,
            self._locks(self._key),
            lambda: self._repository.get_or_create(self.project_id),
            self._repository.update,
            mutate,
        )

    # --- Business details ---

    async def update_business_details(self, **details: object) -> ProjectMemoryData:
        """Shallow-merge *details* into the stored business details.

        ``None`` values are skipped so a partial snapshot never erases a
        field that is already known.
        """
        updates = {k: v for k, v in details.items() if v is not None}

        def mutate(record: ProjectMemoryData) -> None:
            merged = {**record.business_details.model_dump(), **updates}
            record.business_details = BusinessDetails.model_validate(merged)

        return await self._write(mutate)

    # --- Design decisions ---

    async def record_design_decision(
        self,
        type: DesignDecisionType,
        before: JsonValue = None,
        after: JsonValue = None,
        rationale: str | None = None,
    ) -> DesignDecision:
        decision = DesignDecision(type=type, before=before, after=after, rationale=rationale)

        def mutate(record: ProjectMemoryData) -> None:
            decisions = [*record.design_decisions, decision]
            record.design_decisions = decisions[-MAX_DESIGN_DECISIONS:]

        await self._write(mutate)
        return decision

    # --- Content history ---

    async def save_content_version(self, section_id: str, content: JsonValue) -> ContentVersion:
        """Store a version of *section_id*'s content, keeping the newest 20 per section."""
        version = ContentVersion(section_id=section_id, content=content)

        def mutate(record: ProjectMemoryData) -> None:
            mine = [v for v in record.content_history if v.section_id == section_id]
            others = [v for v in record.content_history if v.section_id != section_id]
            mine = [*mine, version][-MAX_CONTENT_VERSIONS_PER_SECTION:]
            record.content_history = others + mine

        await self._write(mutate)
        return version

    async def get_content_history(self, section_id: str) -> list[ContentVersion]:
        """Versions of *section_id*, newest first."""
        memory = await self.get_memory()
        versions = [v for v in memory.content_history if v.section_id == section_id]
        return sorted(versions, key=lambda v: v.timestamp, reverse=True)

    # --- Generated content cache ---

    async def cache_generated_content(self, key: str, content: JsonValue) -> None:
        def mutate(record: ProjectMemoryData) -> None:
            record.generated_content_cache = {**record.generated_content_cache, key: content}

        await self._write(mutate)

    async def get_cached_content(self, key: str) -> JsonValue | None:
        memory = await self.get_memory()
        return memory.generated_content_cache.get(key)

    # --- Site goals ---

    async def set_site_goals(self, goals: Iterable[tuple[str, GoalPriority]]) -> list[SiteGoal]:
        """Replace the goal list; each entry is ``(goal, priority)``."""
        site_goals = [SiteGoal(goal=goal, priority=priority) for goal, priority in goals]

        def mutate(record: ProjectMemoryData) -> None:
            record.site_goals = site_goals

        await self._write(mutate)
        return site_goals

    async def update_goal_status(self, goal_id: str, status: GoalStatus) -> None:
        def mutate(record: ProjectMemoryData) -> None:
            for goal in record.site_goals:
                if goal.id == goal_id:
                    goal.status = status
                    return
            raise MemoryNotFoundError(f"Site goal {goal_id} not found")

        await self._write(mutate)

    # --- Discovered info ---

    async def set_discovered_info(self, info: DiscoveredInfo) -> ProjectMemoryData:
        """Merge *info* over what was discovered before; unset fields keep old values."""
        updates = info.model_dump(exclude_none=True)

        def mutate(record: ProjectMemoryData) -> None:
            merged = {**record.discovered_info.model_dump(), **updates}
            record.discovered_info = DiscoveredInfo.model_validate(merged)

        stored = await self._write(mutate)
        logger.info(f"Stored discovered info for project {self.project_id}: {sorted(updates)}")
        return stored

    async def get_discovered_info(self) -> DiscoveredInfo:
        memory = await self.get_memory()
        return memory.discovered_info
