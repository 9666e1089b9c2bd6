"""AI memory: user, project and session tiers.

Stores (``UserMemoryStore``, ``ProjectMemoryStore``, ``SessionMemoryStore``)
sit on repository protocols with in-memory and SQLAlchemy implementations.
``MemoryContextBuilder`` turns the tiers into a system-prompt section.
"""
from __future__ import annotations

from sitecraft.core.memory.context_builder import (
    MemoryContextBuilder,
    build_system_prompt_section,
    format_conversation_for_prompt,
)
from sitecraft.core.memory.locks import KeyedLocks, memory_locks, write_versioned
from sitecraft.core.memory.models import (
    AIMemoryContext,
    ChatMessageData,
    DiscoveredInfo,
    MessageRole,
    ProjectMemoryData,
    SessionMemoryData,
    SessionStatus,
    SessionTaskStatus,
    UserMemoryData,
)
from sitecraft.core.memory.project import ProjectMemoryStore
from sitecraft.core.memory.repository import (
    InMemoryProjectMemoryRepository,
    InMemorySessionRepository,
    InMemoryUserMemoryRepository,
    ProjectMemoryRepository,
    SessionRepository,
    UserMemoryRepository,
)
from sitecraft.core.memory.session import SessionMemoryStore
from sitecraft.core.memory.sql_repository import (
    SqlProjectMemoryRepository,
    SqlSessionRepository,
    SqlUserMemoryRepository,
)
from sitecraft.core.memory.user import UserMemoryStore

__all__ = [
    "AIMemoryContext",
    "ChatMessageData",
    "DiscoveredInfo",
    "InMemoryProjectMemoryRepository",
    "InMemorySessionRepository",
    "InMemoryUserMemoryRepository",
    "KeyedLocks",
    "MemoryContextBuilder",
    "MessageRole",
    "ProjectMemoryData",
    "ProjectMemoryRepository",
    "ProjectMemoryStore",
    "SessionMemoryData",
    "SessionMemoryStore",
    "SessionRepository",
    "SessionStatus",
    "SessionTaskStatus",
    "SqlProjectMemoryRepository",
    "SqlSessionRepository",
    "SqlUserMemoryRepository",
    "UserMemoryData",
    "UserMemoryRepository",
    "UserMemoryStore",
    "build_system_prompt_section",
    "format_conversation_for_prompt",
    "memory_locks",
    "write_versioned",
]
