"""
Database module for SiteCraft.

Provides async SQLAlchemy support with PostgreSQL and SQLite.
"""
from __future__ import annotations

from sitecraft.db.database import (
    Base,
    close_db,
    create_engine,
    create_tables,
    get_session_factory,
    init_db,
    session_factory_for,
)
from sitecraft.db.models import ChatMessage, ChatSession, ProjectMemory, Site, UserMemory

__all__ = [
    "Base",
    "ChatMessage",
    "ChatSession",
    "ProjectMemory",
    "Site",
    "UserMemory",
    "close_db",
    "create_engine",
    "create_tables",
    "get_session_factory",
    "init_db",
    "session_factory_for",
]
