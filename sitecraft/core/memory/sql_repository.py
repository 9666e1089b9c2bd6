"""SQLAlchemy-backed memory repositories.

The only place that touches the memory tables.  Stores depend on the
``*Repository`` protocols, never on this module directly.

Writes are compare-and-swap: ``UPDATE ... WHERE version = :expected`` and a
rowcount check.  A lost race returns ``None`` so the store can re-read and
retry.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sitecraft.core.errors import MemoryConflictError
from sitecraft.db import models as db
from sitecraft.core.memory.models import (
    ChatMessageData,
    ChatSessionRecord,
    MessageRole,
    ProjectMemoryData,
    SessionStatus,
    SessionSummary,
    UserMemoryData,
    VersionedModel,
    utc_now,
)
from sitecraft.models.base import to_camel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=VersionedModel)

_USER_FIELDS = ("style_preferences", "business_context", "interaction_patterns", "decision_history")
_PROJECT_FIELDS = (
    "business_details",
    "design_decisions",
    "content_history",
    "generated_content_cache",
    "site_goals",
    "discovered_info",
)
_SESSION_JSON_FIELDS = ("current_tasks", "pending_questions", "wip_state")


def _json_columns(record: VersionedModel, fields: tuple[str, ...]) -> dict[str, Any]:
    dumped = record.to_wire(exclude_none=False)
    return {name: dumped[to_camel(name)] for name in fields}


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _from_row(model: type[M], row: Any, key: str, fields: tuple[str, ...]) -> M:
    data: dict[str, Any] = {name: getattr(row, name) for name in fields}
    data[key] = getattr(row, key)
    data["version"] = row.version
    return model.model_validate(data)


def _session_from_row(row: db.ChatSession) -> ChatSessionRecord:
    data: dict[str, Any] = {name: getattr(row, name) for name in _SESSION_JSON_FIELDS}
    data.update(
        id=row.id,
        project_id=row.project_id,
        user_id=row.user_id,
        status=row.status,
        created_at=_as_utc(row.created_at),
        last_activity_at=_as_utc(row.last_activity_at),
        version=row.version,
    )
    return ChatSessionRecord.model_validate(data)


class _SqlRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory


class SqlUserMemoryRepository(_SqlRepository):
    async def get(self, user_id: str) -> UserMemoryData | None:
        async with self._session_factory() as session:
            row = await session.get(db.UserMemory, user_id)
            return _from_row(UserMemoryData, row, "user_id", _USER_FIELDS) if row else None

    async def get_or_create(self, user_id: str) -> UserMemoryData:
        existing = await self.get(user_id)
        if existing is not None:
            return existing
        fresh = UserMemoryData(user_id=user_id)
        created = await self.update(fresh, expected_version=0)
        if created is not None:
            return created
        # Another writer created it first.
        raced = await self.get(user_id)
        if raced is None:
            raise MemoryConflictError(f"user:{user_id}", 1)
        return raced

    async def update(self, record: UserMemoryData, expected_version: int) -> UserMemoryData | None:
        values = _json_columns(record, _USER_FIELDS)
        async with self._session_factory() as session:
            if expected_version == 0:
                session.add(db.UserMemory(user_id=record.user_id, version=1, **values))
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return None
            else:
                result = await session.execute(
                    update(db.UserMemory)
                    .where(
                        db.UserMemory.user_id == record.user_id,
                        db.UserMemory.version == expected_version,
                    )
                    .values(version=expected_version + 1, updated_at=utc_now(), **values)
                )
                await session.commit()
                if result.rowcount != 1:
                    return None
        return record.model_copy(update={"version": expected_version + 1})


class SqlProjectMemoryRepository(_SqlRepository):
    async def get(self, project_id: str) -> ProjectMemoryData | None:
        async with self._session_factory() as session:
            row = await session.get(db.ProjectMemory, project_id)
            return _from_row(ProjectMemoryData, row, "project_id", _PROJECT_FIELDS) if row else None

    async def get_or_create(self, project_id: str) -> ProjectMemoryData:
        existing = await self.get(project_id)
        if existing is not None:
            return existing
        created = await self.update(ProjectMemoryData(project_id=project_id), expected_version=0)
        if created is not None:
            return created
        raced = await self.get(project_id)
        if raced is None:
            raise MemoryConflictError(f"project:{project_id}", 1)
        return raced

    async def update(
        self, record: ProjectMemoryData, expected_version: int
    ) -> ProjectMemoryData | None:
        values = _json_columns(record, _PROJECT_FIELDS)
        async with self._session_factory() as session:
            if expected_version == 0:
                session.add(db.ProjectMemory(project_id=record.project_id, version=1, **values))
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return None
            else:
                result = await session.execute(
                    update(db.ProjectMemory)
                    .where(
                        db.ProjectMemory.project_id == record.project_id,
                        db.ProjectMemory.version == expected_version,
                    )
                    .values(version=expected_version + 1, updated_at=utc_now(), **values)
                )
                await session.commit()
                if result.rowcount != 1:
                    return None
        return record.model_copy(update={"version": expected_version + 1})


class SqlSessionRepository(_SqlRepository):
    async def get(self, session_id: str) -> ChatSessionRecord | None:
        async with self._session_factory() as session:
            row = await session.get(db.ChatSession, session_id)
            return _session_from_row(row) if row else None

    async def find_active(self, project_id: str, user_id: str) -> ChatSessionRecord | None:
        stmt = (
            select(db.ChatSession)
            .where(
                db.ChatSession.project_id == project_id,
                db.ChatSession.user_id == user_id,
                db.ChatSession.status == SessionStatus.ACTIVE.value,
            )
            .order_by(db.ChatSession.last_activity_at.desc())
            .limit(1)
        )
        async with self._session_factory() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
            return _session_from_row(row) if row else None

    async def create(self, project_id: str, user_id: str) -> ChatSessionRecord:
        record = ChatSessionRecord(project_id=project_id, user_id=user_id, version=1)
        async with self._session_factory() as session:
            session.add(db.ChatSession(
                id=record.id,
                project_id=project_id,
                user_id=user_id,
                status=record.status.value,
                created_at=record.created_at,
                last_activity_at=record.last_activity_at,
                version=1,
                **_json_columns(record, _SESSION_JSON_FIELDS),
            ))
            await session.commit()
        logger.info(f"Created chat session {record.id[:8]} for project {project_id}")
        return record

    async def update(
        self, record: ChatSessionRecord, expected_version: int
    ) -> ChatSessionRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                update(db.ChatSession)
                .where(
                    db.ChatSession.id == record.id,
                    db.ChatSession.version == expected_version,
                )
                .values(
                    status=record.status.value,
                    last_activity_at=record.last_activity_at,
                    version=expected_version + 1,
                    **_json_columns(record, _SESSION_JSON_FIELDS),
                )
            )
            await session.commit()
            if result.rowcount != 1:
                return None
        return record.model_copy(update={"version": expected_version + 1})

    async def list_sessions(
        self,
        project_id: str,
        user_id: str,
        status: SessionStatus | None = None,
    ) -> list[SessionSummary]:
        stmt = (
            select(db.ChatSession, func.count(db.ChatMessage.id))
            .outerjoin(db.ChatMessage, db.ChatMessage.session_id == db.ChatSession.id)
            .where(
                db.ChatSession.project_id == project_id,
                db.ChatSession.user_id == user_id,
            )
            .group_by(db.ChatSession.id)
            .order_by(db.ChatSession.last_activity_at.desc())
        )
        if status is not None:
            stmt = stmt.where(db.ChatSession.status == status.value)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()
        return [
            SessionSummary(
                id=row.id,
                status=SessionStatus(row.status),
                last_activity_at=_as_utc(row.last_activity_at),
                message_count=count,
            )
            for row, count in rows
        ]

    async def add_message(self, session_id: str, message: ChatMessageData) -> None:
        dumped = message.model_dump(mode="json")
        async with self._session_factory() as session:
            session.add(db.ChatMessage(
                session_id=session_id,
                role=message.role.value,
                content=message.content,
                tool_calls=dumped["tool_calls"],
                actions=dumped["actions"],
                tokens=message.tokens,
                created_at=message.created_at,
            ))
            await session.execute(
                update(db.ChatSession)
                .where(db.ChatSession.id == session_id)
                .values(last_activity_at=utc_now())
            )
            await session.commit()

    async def recent_messages(self, session_id: str, limit: int) -> list[ChatMessageData]:
        if limit <= 0:
            return []
        stmt = (
            select(db.ChatMessage)
            .where(db.ChatMessage.session_id == session_id)
            .order_by(db.ChatMessage.created_at.desc(), db.ChatMessage.seq.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [
            ChatMessageData(
                role=MessageRole(row.role),
                content=row.content,
                tool_calls=row.tool_calls or [],
                actions=row.actions or [],
                tokens=row.tokens,
                created_at=_as_utc(row.created_at),
            )
            for row in reversed(rows)
        ]
