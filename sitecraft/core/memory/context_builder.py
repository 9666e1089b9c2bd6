"""Renders the three memory tiers into a system-prompt section.

``build_context`` reads all tiers concurrently; ``build_system_prompt_section``
is a pure function of the context it is given.
"""
from __future__ import annotations

import asyncio
import logging

from sitecraft.contracts.llm_types import ChatMessage
from sitecraft.core.memory.models import (
    AIMemoryContext,
    ChatMessageData,
    MessageRole,
    ProjectMemoryData,
    SessionMemoryData,
    SessionTaskStatus,
    UserMemoryData,
)
from sitecraft.core.memory.project import ProjectMemoryStore
from sitecraft.core.memory.session import DEFAULT_HISTORY_LIMIT, SessionMemoryStore
from sitecraft.core.memory.user import UserMemoryStore

logger = logging.getLogger(__name__)


def _user_lines(user: UserMemoryData) -> list[str]:
    lines: list[str] = []
    style = user.style_preferences
    if style.preferred_colors:
        lines.append(f"- Preferred colors: {', '.join(style.preferred_colors)}")
    fonts = style.preferred_fonts
    lines.append(f"- Preferred fonts: {fonts.heading} (headings), {fonts.body} (body)")
    lines.append(f"- Design style preference: {style.design_style}")

    patterns = user.interaction_patterns
    lines.append(f"- User prefers {patterns.response_style} responses")
    lines.append(f"- Skill level: {patterns.help_level}")
    return lines


def _project_lines(project: ProjectMemoryData) -> list[str]:
    lines: list[str] = []
    details = project.business_details
    if details.name:
        lines.append(f"- Business name: {details.name}")
    if details.type:
        lines.append(f"- Business type: {details.type}")
    if details.description:
        lines.append(f"- Description: {details.description}")
    if details.target_audience:
        lines.append(f"- Target audience: {', '.join(details.target_audience)}")
    if details.goals:
        lines.append(f"- Business goals: {', '.join(details.goals)}")

    info = project.discovered_info
    if info.existing_website and info.existing_website.url:
        lines.append(f"- Existing website: {info.existing_website.url}")
    if info.social_links:
        links = ", ".join(f"{k}: {v}" for k, v in info.social_links.items())
        lines.append(f"- Social links: {links}")
    if info.contact_info and info.contact_info.email:
        lines.append(f"- Contact email: {info.contact_info.email}")

    pending_goals = [f"{g.goal} ({g.priority})" for g in project.site_goals if g.status == "pending"]
    if pending_goals:
        lines.append(f"- Site goals: {', '.join(pending_goals)}")
    return lines


def _session_blocks(session: SessionMemoryData) -> list[str]:
    blocks: list[str] = []
    open_tasks = [
        f"- [{t.status.value}] {t.task}"
        for t in session.current_tasks
        if t.status != SessionTaskStatus.COMPLETED
    ]
    if open_tasks:
        blocks.append("### Current Tasks\n" + "\n".join(open_tasks))

    if session.pending_questions:
        questions = "\n".join(
            f"- {q.question} (field: {q.field}, required: {'true' if q.required else 'false'})"
            for q in session.pending_questions
        )
        blocks.append(f"### Pending Questions (ASK BEFORE PROCEEDING)\n{questions}")

    if session.wip_state.current_step:
        blocks.append(f"### Current Step: {session.wip_state.current_step}")
    return blocks


def build_system_prompt_section(context: AIMemoryContext) -> str:
    """Memory section for the system prompt, or ``""`` when there is nothing to say."""
    sections: list[str] = []

    if context.user is not None:
        user_lines = _user_lines(context.user)
        if user_lines:
            sections.append("## User Preferences\n" + "\n".join(user_lines))

    if context.project is not None:
        project_lines = _project_lines(context.project)
        if project_lines:
            sections.append("## Project Context\n" + "\n".join(project_lines))

    if context.session is not None:
        session_blocks = _session_blocks(context.session)
        if session_blocks:
            sections.append("## Session State\n" + "\n\n".join(session_blocks))

    if not sections:
        return ""
    return "\n# AI Memory Context\n\n" + "\n\n".join(sections)


def format_conversation_for_prompt(messages: list[ChatMessageData]) -> list[ChatMessage]:
    """Stored messages as provider chat messages; SYSTEM entries are dropped."""
    return [
        {
            "role": "user" if m.role == MessageRole.USER else "assistant",
            "content": m.content,
        }
        for m in messages
        if m.role != MessageRole.SYSTEM
    ]


class MemoryContextBuilder:
    def __init__(
        self,
        user_store: UserMemoryStore,
        project_store: ProjectMemoryStore,
        session_store: SessionMemoryStore,
    ) -> None:
        self.user_store = user_store
        self.project_store = project_store
        self.session_store = session_store

    async def build_context(self) -> AIMemoryContext:
        user, project, session = await asyncio.gather(
            self.user_store.get_memory(),
            self.project_store.get_memory(),
            self.session_store.get_session_data(),
        )
        return AIMemoryContext(user=user, project=project, session=session)

    async def get_conversation_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[ChatMessageData]:
        return await self.session_store.get_conversation_history(limit)

    def build_system_prompt_section(self, context: AIMemoryContext) -> str:
        return build_system_prompt_section(context)

    def format_conversation_for_prompt(self, messages: list[ChatMessageData]) -> list[ChatMessage]:
        return format_conversation_for_prompt(messages)
