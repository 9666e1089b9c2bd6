"""Repository interfaces for the memory tiers, plus in-memory implementations.

Every read returns an explicit optional: ``get`` gives ``None`` when the
record does not exist, ``update`` gives ``None`` when the stored version no
longer matches ``expected_version``.  Nothing is created implicitly except
through ``get_or_create`` / ``create``.

Records handed out are copies; mutating one never changes stored state.
"""
from __future__ import annotations

from typing import Protocol

from sitecraft.core.memory.models import (
    ChatMessageData,
    ChatSessionRecord,
    ProjectMemoryData,
    SessionStatus,
    SessionSummary,
    UserMemoryData,
    utc_now,
)


class UserMemoryRepository(Protocol):
    async def get(self, user_id: str) -> UserMemoryData | None: ...

    async def get_or_create(self, user_id: str) -> UserMemoryData: ...

    async def update(self, record: UserMemoryData, expected_version: int) -> UserMemoryData | None: ...


class ProjectMemoryRepository(Protocol):
    async def get(self, project_id: str) -> ProjectMemoryData | None: ...

    async def get_or_create(self, project_id: str) -> ProjectMemoryData: ...

    async def update(
        self, record: ProjectMemoryData, expected_version: int
    ) -> ProjectMemoryData | None: ...


class SessionRepository(Protocol):
    async def get(self, session_id: str) -> ChatSessionRecord | None: ...

    async def find_active(self, project_id: str, user_id: str) -> ChatSessionRecord | None:
        """Most recently active ACTIVE session for the pair, if any."""
        ...

    async def create(self, project_id: str, user_id: str) -> ChatSessionRecord: ...

    async def update(
        self, record: ChatSessionRecord, expected_version: int
    ) -> ChatSessionRecord | None: ...

    async def list_sessions(
        self,
        project_id: str,
        user_id: str,
        status: SessionStatus | None = None,
    ) -> list[SessionSummary]:
        """Sessions for the pair, most recently active first."""
        ...

    async def add_message(self, session_id: str, message: ChatMessageData) -> None: ...

    async def recent_messages(self, session_id: str, limit: int) -> list[ChatMessageData]:
        """The newest *limit* messages, oldest first."""
        ...


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------


class InMemoryUserMemoryRepository:
    def __init__(self) -> None:
        self._records: dict[str, UserMemoryData] = {}

    async def get(self, user_id: str) -> UserMemoryData | None:
        record = self._records.get(user_id)
        return record.model_copy(deep=True) if record else None

    async def get_or_create(self, user_id: str) -> UserMemoryData:
        if user_id not in self._records:
            self._records[user_id] = UserMemoryData(user_id=user_id, version=1)
        return self._records[user_id].model_copy(deep=True)

    async def update(self, record: UserMemoryData, expected_version: int) -> UserMemoryData | None:
        stored = self._records.get(record.user_id)
        current_version = stored.version if stored else 0
        if current_version != expected_version:
            return None
        saved = record.model_copy(deep=True, update={"version": expected_version + 1})
        self._records[record.user_id] = saved
        return saved.model_copy(deep=True)


class InMemoryProjectMemoryRepository:
    def __init__(self) -> None:
        self._records: dict[str, ProjectMemoryData] = {}

    async def get(self, project_id: str) -> ProjectMemoryData | None:
        record = self._records.get(project_id)
        return record.model_copy(deep=True) if record else None

    async def get_or_create(self, project_id: str) -> ProjectMemoryData:
        if project_id not in self._records:
            self._records[project_id] = ProjectMemoryData(project_id=project_id, version=1)
        return self._records[project_id].model_copy(deep=True)

    async def update(
        self, record: ProjectMemoryData, expected_version: int
    ) -> ProjectMemoryData | None:
        stored = self._records.get(record.project_id)
        current_version = stored.version if stored else 0
        if current_version != expected_version:
            return None
        saved = record.model_copy(deep=True, update={"version": expected_version + 1})
        self._records[record.project_id] = saved
        return saved.model_copy(deep=True)


class InMemorySessionRepository:
    def __init__(self) -> None:
        self._sessions: dict[str, ChatSessionRecord] = {}
        self._messages: dict[str, list[ChatMessageData]] = {}

    async def get(self, session_id: str) -> ChatSessionRecord | None:
        record = self._sessions.get(session_id)
        return record.model_copy(deep=True) if record else None

    async def find_active(self, project_id: str, user_id: str) -> ChatSessionRecord | None:
        candidates = [
            s for s in self._sessions.values()
            if s.project_id == project_id
            and s.user_id == user_id
            and s.status == SessionStatus.ACTIVE
        ]
        if not candidates:
            return None
        latest = max(candidates, key=lambda s: s.last_activity_at)
        return latest.model_copy(deep=True)

    async def create(self, project_id: str, user_id: str) -> ChatSessionRecord:
        record = ChatSessionRecord(project_id=project_id, user_id=user_id, version=1)
        self._sessions[record.id] = record
        self._messages[record.id] = []
        return record.model_copy(deep=True)

    async def update(
        self, record: ChatSessionRecord, expected_version: int
    ) -> ChatSessionRecord | None:
        stored = self._sessions.get(record.id)
        if stored is None or stored.version != expected_version:
            return None
        saved = record.model_copy(deep=True, update={"version": expected_version + 1})
        self._sessions[record.id] = saved
        return saved.model_copy(deep=True)

    async def list_sessions(
        self,
        project_id: str,
        user_id: str,
        status: SessionStatus | None = None,
    ) -> list[SessionSummary]:
        sessions = [
            s for s in self._sessions.values()
            if s.project_id == project_id
            and s.user_id == user_id
            and (status is None or s.status == status)
        ]
        sessions.sort(key=lambda s: s.last_activity_at, reverse=True)
        return [
            SessionSummary(
                id=s.id,
                status=s.status,
                last_activity_at=s.last_activity_at,
                message_count=len(self._messages.get(s.id, [])),
            )
            for s in sessions
        ]

    async def add_message(self, session_id: str, message: ChatMessageData) -> None:
        self._messages.setdefault(session_id, []).append(message.model_copy(deep=True))
        stored = self._sessions.get(session_id)
        if stored is not None:
            stored.last_activity_at = utc_now()

    async def recent_messages(self, session_id: str, limit: int) -> list[ChatMessageData]:
        messages = self._messages.get(session_id, [])
        if limit <= 0:
            return []
        return [m.model_copy(deep=True) for m in messages[-limit:]]
