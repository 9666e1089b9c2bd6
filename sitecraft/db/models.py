"""
SQLAlchemy ORM models for SiteCraft.

Tables:
- sites: One row per project, holding the serialized SiteState
- user_memories: User-tier AI memory (one row per user)
- project_memories: Project-tier AI memory (one row per project)
- chat_sessions: Session-tier AI memory and session status
- chat_messages: Messages within a chat session

Memory rows carry a ``version`` column used for compare-and-swap writes.
JSON columns hold the camelCase wire form of the memory models.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from sitecraft.db.database import Base


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


class Site(Base):
    """
    A project's website.

    ``project_id`` is the identifier the editor sends; ``owner_id`` is the
    user allowed to run AI commands against it.
    """
    __tablename__ = "sites"

    project_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    site_id: Mapped[str] = mapped_column(String(36), default=generate_uuid, nullable=False)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    state: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Site {self.project_id} v{self.version}>"


class UserMemory(Base):
    __tablename__ = "user_memories"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    style_preferences: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    business_context: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    interaction_patterns: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    decision_history: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<UserMemory {self.user_id} v{self.version}>"


class ProjectMemory(Base):
    __tablename__ = "project_memories"

    project_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    business_details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    design_decisions: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    content_history: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    generated_content_cache: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    site_goals: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    discovered_info: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProjectMemory {self.project_id} v{self.version}>"


class ChatSession(Base):
    """
    A chat session between one user and the AI on one project.

    Status is ACTIVE, PAUSED or COMPLETED; at most one ACTIVE session per
    (project, user) is reused by the session store.
    """
    __tablename__ = "chat_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    project_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default="ACTIVE", nullable=False, index=True)
    current_tasks: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    pending_questions: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    wip_state: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )

    messages: Mapped[list["ChatMessage"]] = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessage.created_at",
    )

    def __repr__(self) -> str:
        return f"<ChatSession {self.id[:8]} {self.status} v{self.version}>"


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    # Insertion order within a session; created_at alone can tie.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, default=generate_uuid)
    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tool_calls: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    actions: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )

    session: Mapped["ChatSession"] = relationship("ChatSession", back_populates="messages")

    def __repr__(self) -> str:
        return f"<ChatMessage {self.id[:8]} {self.role}>"
