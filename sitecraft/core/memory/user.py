"""User-tier memory: preferences and decisions that follow a user across projects."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Callable

from sitecraft.core.memory.locks import KeyedLocks, memory_locks, write_versioned
from sitecraft.core.memory.models import (
    MAX_DECISION_HISTORY,
    BusinessContext,
    DecisionRecord,
    InteractionPatterns,
    StylePreferences,
    UserMemoryData,
)
from sitecraft.core.memory.repository import UserMemoryRepository

logger = logging.getLogger(__name__)


class UserMemoryStore:
    """Reads and updates one user's memory record.

    Reads never create a record: an unknown user gets defaults.  Every
    update is a locked, versioned read-modify-write.
    """

    def __init__(
        self,
        user_id: str,
        repository: UserMemoryRepository,
        locks: KeyedLocks = memory_locks,
    ) -> None:
        self.user_id = user_id
        self._repository = repository
        self._locks = locks

    @property
    def _key(self) -> str:
        return f"user:{self.user_id}"

    async def get_memory(self) -> UserMemoryData:
        record = await self._repository.get(self.user_id)
        return record if record is not None else UserMemoryData(user_id=self.user_id)

    async def _write(self, mutate: Callable[[UserMemoryData], None]) -> UserMemoryData:
        return await write_versioned(
            self._key,
            self._locks(self._key),
            lambda: self._repository.get_or_create(self.user_id),
            self._repository.update,
            mutate,
        )

    async def update_style_preferences(self, **prefs: object) -> UserMemoryData:
        def mutate(record: UserMemoryData) -> None:
            merged = {**record.style_preferences.model_dump(), **prefs}
            record.style_preferences = StylePreferences.model_validate(merged)

        return await self._write(mutate)

    async def update_business_context(self, **context: object) -> UserMemoryData:
        def mutate(record: UserMemoryData) -> None:
            merged = {**record.business_context.model_dump(), **context}
            record.business_context = BusinessContext.model_validate(merged)

        return await self._write(mutate)

    async def update_interaction_patterns(self, **patterns: object) -> UserMemoryData:
        def mutate(record: UserMemoryData) -> None:
            merged = {**record.interaction_patterns.model_dump(), **patterns}
            record.interaction_patterns = InteractionPatterns.model_validate(merged)

        return await self._write(mutate)

    async def learn_from_decision(
        self,
        context: str,
        decision: str,
        field: str | None = None,
    ) -> UserMemoryData:
        """Append a decision, keeping the newest ``MAX_DECISION_HISTORY``."""
        entry = DecisionRecord(context=context, decision=decision, field=field)

        def mutate(record: UserMemoryData) -> None:
            history = [*record.decision_history, entry]
            record.decision_history = history[-MAX_DECISION_HISTORY:]

        return await self._write(mutate)

    async def infer_preferences(self) -> dict[str, list[str]]:
        """Most frequent colors from past color decisions (up to five).

        Returns ``{}`` when no color decision has been recorded.
        """
        memory = await self.get_memory()
        colors = [d.decision for d in memory.decision_history if d.field == "color"]
        if not colors:
            return {}
        # Counter.most_common keeps first-seen order among equal counts.
        return {"preferred_colors": [color for color, _ in Counter(colors).most_common(5)]}
