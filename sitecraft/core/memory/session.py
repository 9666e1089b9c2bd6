"""Session-tier memory: one chat session's tasks, questions, WIP state and messages.

A ``SessionMemoryStore`` is bound to a (project, user) pair.  The first call
that needs a session reuses the most recently active ACTIVE session for the
pair, or creates one; the chosen id is cached on the store until the session
is paused or completed.
"""
from __future__ import annotations

import logging
from typing import Callable

from pydantic import JsonValue

from sitecraft.core.errors import MemoryNotFoundError
from sitecraft.core.memory.locks import KeyedLocks, memory_locks, write_versioned
from sitecraft.core.memory.models import (
    ChatMessageData,
    ChatSessionRecord,
    MessageRole,
    PendingQuestion,
    SessionMemoryData,
    SessionStatus,
    SessionSummary,
    SessionTask,
    SessionTaskStatus,
    WIPState,
    utc_now,
)
from sitecraft.core.memory.repository import SessionRepository

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


class SessionMemoryStore:
    def __init__(
        self,
        project_id: str,
        user_id: str,
        repository: SessionRepository,
        locks: KeyedLocks = memory_locks,
    ) -> None:
        self.project_id = project_id
        self.user_id = user_id
        self._repository = repository
        self._locks = locks
        self._session_id: str | None = None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def get_or_create_session(self) -> str:
        if self._session_id is not None:
            return self._session_id

        async with self._locks(f"session-owner:{self.project_id}:{self.user_id}"):
            existing = await self._repository.find_active(self.project_id, self.user_id)
            if existing is not None:
                self._session_id = existing.id
                await self._write(lambda record: setattr(record, "last_activity_at", utc_now()))
                return existing.id

            created = await self._repository.create(self.project_id, self.user_id)
            logger.info(f"Started session {created.id[:8]} for project {self.project_id}")
            self._session_id = created.id
            return created.id

    async def _load(self, session_id: str) -> ChatSessionRecord:
        record = await self._repository.get(session_id)
        if record is None:
            raise MemoryNotFoundError(f"Chat session {session_id} not found")
        return record

    async def _write(
        self,
        mutate: Callable[[ChatSessionRecord], None],
        session_id: str | None = None,
    ) -> ChatSessionRecord:
        sid = session_id or await self.get_or_create_session()
        key = f"session:{sid}"
        return await write_versioned(
            key,
            self._locks(key),
            lambda: self._load(sid),
            self._repository.update,
            mutate,
        )

    async def get_session_data(self) -> SessionMemoryData:
        record = await self._load(await self.get_or_create_session())
        return SessionMemoryData.from_record(record)

    async def pause_session(self) -> None:
        await self._write(lambda record: setattr(record, "status", SessionStatus.PAUSED))
        self._session_id = None

    async def complete_session(self) -> None:
        await self._write(lambda record: setattr(record, "status", SessionStatus.COMPLETED))
        self._session_id = None

    async def resume_session(self, session_id: str) -> None:
        """Reactivate *session_id* and make it this store's session.

        Raises:
            MemoryNotFoundError: no session has that id.
        """
        def mutate(record: ChatSessionRecord) -> None:
            record.status = SessionStatus.ACTIVE
            record.last_activity_at = utc_now()

        await self._write(mutate, session_id=session_id)
        self._session_id = session_id

    async def list_sessions(self, status: SessionStatus | None = None) -> list[SessionSummary]:
        return await self._repository.list_sessions(self.project_id, self.user_id, status)

    # ------------------------------------------------------------------
    # Conversation history
    # ------------------------------------------------------------------

    async def get_conversation_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[ChatMessageData]:
        """The newest *limit* messages, oldest first."""
        session_id = await self.get_or_create_session()
        return await self._repository.recent_messages(session_id, limit)

    async def add_message(
        self,
        role: MessageRole,
        content: str,
        tool_calls: list[JsonValue] | None = None,
        actions: list[JsonValue] | None = None,
        tokens: int | None = None,
    ) -> ChatMessageData:
        session_id = await self.get_or_create_session()
        message = ChatMessageData(
            role=role,
            content=content,
            tool_calls=tool_calls or [],
            actions=actions or [],
            tokens=tokens,
        )
        await self._repository.add_message(session_id, message)
        return message

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def get_tasks(self) -> list[SessionTask]:
        return (await self.get_session_data()).current_tasks

    async def add_task(self, task: str, priority: int = 1) -> SessionTask:
        """Add a pending task; the list stays sorted by priority, highest first."""
        new_task = SessionTask(task=task, priority=priority)

        def mutate(record: ChatSessionRecord) -> None:
            tasks = [*record.current_tasks, new_task]
            record.current_tasks = sorted(tasks, key=lambda t: t.priority, reverse=True)

        await self._write(mutate)
        return new_task

    async def update_task_status(self, task_id: str, status: SessionTaskStatus) -> None:
        def mutate(record: ChatSessionRecord) -> None:
            for task in record.current_tasks:
                if task.id == task_id:
                    task.status = status
                    if status == SessionTaskStatus.COMPLETED:
                        task.completed_at = utc_now()
                    return
            raise MemoryNotFoundError(f"Task {task_id} not found")

        await self._write(mutate)

    async def remove_task(self, task_id: str) -> None:
        def mutate(record: ChatSessionRecord) -> None:
            remaining = [t for t in record.current_tasks if t.id != task_id]
            if len(remaining) == len(record.current_tasks):
                raise MemoryNotFoundError(f"Task {task_id} not found")
            record.current_tasks = remaining

        await self._write(mutate)

    async def clear_completed_tasks(self) -> None:
        def mutate(record: ChatSessionRecord) -> None:
            record.current_tasks = [
                t for t in record.current_tasks if t.status != SessionTaskStatus.COMPLETED
            ]

        await self._write(mutate)

    # ------------------------------------------------------------------
    # Pending questions
    # ------------------------------------------------------------------

    async def get_pending_questions(self) -> list[PendingQuestion]:
        return (await self.get_session_data()).pending_questions

    async def add_pending_question(
        self,
        field: str,
        question: str,
        required: bool = True,
        options: list[str] | None = None,
        context: str | None = None,
    ) -> PendingQuestion:
        """Register a question for *field*; an existing one for the field is returned as-is."""
        candidate = PendingQuestion(
            field=field,
            question=question,
            required=required,
            options=options,
            context=context,
        )
        result: list[PendingQuestion] = []

        def mutate(record: ChatSessionRecord) -> None:
            result.clear()
            existing = next((q for q in record.pending_questions if q.field == field), None)
            if existing is not None:
                result.append(existing)
                return
            record.pending_questions = [*record.pending_questions, candidate]
            result.append(candidate)

        await self._write(mutate)
        return result[0]

    async def resolve_pending_question(self, question_id: str) -> None:
        def mutate(record: ChatSessionRecord) -> None:
            remaining = [q for q in record.pending_questions if q.id != question_id]
            if len(remaining) == len(record.pending_questions):
                raise MemoryNotFoundError(f"Pending question {question_id} not found")
            record.pending_questions = remaining

        await self._write(mutate)

    async def resolve_question_by_field(self, field: str) -> None:
        """Drop any pending question for *field*; a no-op when there is none."""
        def mutate(record: ChatSessionRecord) -> None:
            record.pending_questions = [q for q in record.pending_questions if q.field != field]

        await self._write(mutate)

    # ------------------------------------------------------------------
    # Work-in-progress state
    # ------------------------------------------------------------------

    async def get_wip_state(self) -> WIPState:
        return (await self.get_session_data()).wip_state

    async def set_wip_state(
        self,
        current_step: str | None = None,
        pending_action: str | None = None,
        partial_data: dict[str, JsonValue] | None = None,
    ) -> None:
        """Merge the given fields over the stored snapshot; ``None`` leaves a field alone."""
        updates = {
            k: v
            for k, v in {
                "current_step": current_step,
                "pending_action": pending_action,
                "partial_data": partial_data,
            }.items()
            if v is not None
        }

        def mutate(record: ChatSessionRecord) -> None:
            record.wip_state = record.wip_state.model_copy(update=updates)

        await self._write(mutate)

    async def clear_wip_state(self) -> None:
        await self._write(lambda record: setattr(record, "wip_state", WIPState()))
