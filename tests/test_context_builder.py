"""Tests for rendering memory into the system prompt."""
from __future__ import annotations

import pytest

from sitecraft.core.memory import (
    AIMemoryContext,
    ChatMessageData,
    KeyedLocks,
    MemoryContextBuilder,
    MessageRole,
    ProjectMemoryData,
    ProjectMemoryStore,
    SessionMemoryData,
    SessionMemoryStore,
    UserMemoryData,
    UserMemoryStore,
    build_system_prompt_section,
    format_conversation_for_prompt,
)
from sitecraft.core.memory.models import (
    BusinessDetails,
    PendingQuestion,
    SessionTask,
    SessionTaskStatus,
    SiteGoal,
    WIPState,
)
from sitecraft.services.repositories import Repositories


class TestBuildSystemPromptSection:
    def test_empty_context(self) -> None:
        assert build_system_prompt_section(AIMemoryContext()) == ""

    def test_default_user_memory(self) -> None:
        section = build_system_prompt_section(AIMemoryContext(user=UserMemoryData(user_id="u")))

        assert section.startswith("\n# AI Memory Context\n\n## User Preferences\n")
        assert "- Preferred fonts: Inter (headings), Inter (body)" in section
        assert "- Design style preference: modern" in section
        assert "- User prefers concise responses" in section
        assert "- Skill level: intermediate" in section
        assert "Preferred colors" not in section

    def test_empty_project_and_session_render_nothing(self) -> None:
        context = AIMemoryContext(
            project=ProjectMemoryData(project_id="p"),
            session=SessionMemoryData(),
        )
        assert build_system_prompt_section(context) == ""

    def test_project_context(self) -> None:
        project = ProjectMemoryData(
            project_id="p",
            business_details=BusinessDetails(name="Acme", type="bakery", target_audience=["Locals"]),
            site_goals=[
                SiteGoal(goal="Sell bread", priority="high"),
                SiteGoal(goal="Old goal", status="achieved"),
            ],
        )

        section = build_system_prompt_section(AIMemoryContext(project=project))

        assert "## Project Context\n- Business name: Acme\n- Business type: bakery" in section
        assert "- Target audience: Locals" in section
        assert "- Site goals: Sell bread (high)" in section
        assert "Old goal" not in section

    def test_session_state(self) -> None:
        session = SessionMemoryData(
            current_tasks=[
                SessionTask(task="add pricing"),
                SessionTask(task="fix hero", status=SessionTaskStatus.COMPLETED),
            ],
            pending_questions=[PendingQuestion(question="What is it called?", field="businessName")],
            wip_state=WIPState(current_step="branding"),
        )

        section = build_system_prompt_section(AIMemoryContext(session=session))

        assert "### Current Tasks\n- [pending] add pricing" in section
        assert "fix hero" not in section
        assert (
            "### Pending Questions (ASK BEFORE PROCEEDING)\n"
            "- What is it called? (field: businessName, required: true)"
        ) in section
        assert "### Current Step: branding" in section

    def test_tier_order(self) -> None:
        context = AIMemoryContext(
            user=UserMemoryData(user_id="u"),
            project=ProjectMemoryData(project_id="p", business_details=BusinessDetails(name="Acme")),
            session=SessionMemoryData(wip_state=WIPState(current_step="content")),
        )

        section = build_system_prompt_section(context)

        positions = [section.index(h) for h in ("## User Preferences", "## Project Context", "## Session State")]
        assert positions == sorted(positions)


class TestFormatConversation:
    def test_system_messages_dropped(self) -> None:
        messages = [
            ChatMessageData(role=MessageRole.SYSTEM, content="internal"),
            ChatMessageData(role=MessageRole.USER, content="Add a FAQ"),
            ChatMessageData(role=MessageRole.ASSISTANT, content="Done"),
        ]

        assert format_conversation_for_prompt(messages) == [
            {"role": "user", "content": "Add a FAQ"},
            {"role": "assistant", "content": "Done"},
        ]


class TestMemoryContextBuilder:
    @pytest.mark.asyncio
    async def test_reads_all_tiers(self, repositories: Repositories, locks: KeyedLocks) -> None:
        user = UserMemoryStore("user-1", repositories.user_memory, locks)
        project = ProjectMemoryStore("proj-1", repositories.project_memory, locks)
        session = SessionMemoryStore("proj-1", "user-1", repositories.sessions, locks)
        await project.update_business_details(name="Acme")
        await session.add_message(MessageRole.USER, "hello")
        builder = MemoryContextBuilder(user, project, session)

        context = await builder.build_context()

        assert context.user is not None and context.user.user_id == "user-1"
        assert context.project is not None and context.project.business_details.name == "Acme"
        assert context.session is not None
        assert "- Business name: Acme" in builder.build_system_prompt_section(context)

        history = await builder.get_conversation_history()
        assert builder.format_conversation_for_prompt(history) == [{"role": "user", "content": "hello"}]
