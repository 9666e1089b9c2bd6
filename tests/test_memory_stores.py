"""Tests for the user, project and session memory stores (in-memory repositories)."""
from __future__ import annotations

import asyncio

import pytest

from sitecraft.core.errors import MemoryConflictError, MemoryNotFoundError
from sitecraft.core.memory import (
    InMemoryProjectMemoryRepository,
    InMemorySessionRepository,
    InMemoryUserMemoryRepository,
    KeyedLocks,
    MessageRole,
    ProjectMemoryStore,
    SessionMemoryStore,
    SessionStatus,
    SessionTaskStatus,
    UserMemoryData,
    UserMemoryStore,
)
from sitecraft.core.memory.locks import MAX_WRITE_ATTEMPTS
from sitecraft.core.memory.models import DiscoveredInfo, ExistingWebsite


class AlwaysStaleUserRepository(InMemoryUserMemoryRepository):
    """Every write loses the version check, as if another process kept winning."""

    def __init__(self) -> None:
        super().__init__()
        self.update_calls = 0

    async def update(self, record: UserMemoryData, expected_version: int) -> UserMemoryData | None:
        self.update_calls += 1
        return None


@pytest.fixture
def user_store(locks: KeyedLocks) -> UserMemoryStore:
    return UserMemoryStore("user-1", InMemoryUserMemoryRepository(), locks)


@pytest.fixture
def project_store(locks: KeyedLocks) -> ProjectMemoryStore:
    return ProjectMemoryStore("proj-1", InMemoryProjectMemoryRepository(), locks)


@pytest.fixture
def session_repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def session_store(session_repo: InMemorySessionRepository, locks: KeyedLocks) -> SessionMemoryStore:
    return SessionMemoryStore("proj-1", "user-1", session_repo, locks)


# ---------------------------------------------------------------------------
# Locks and versioning
# ---------------------------------------------------------------------------


class TestKeyedLocks:
    def test_same_key_same_lock(self) -> None:
        locks = KeyedLocks()
        assert locks("a") is locks("a")
        assert locks("a") is not locks("b")

    def test_unreferenced_locks_are_dropped(self) -> None:
        locks = KeyedLocks()
        held = locks("kept")
        locks("dropped")

        assert len(locks) == 1
        assert locks("kept") is held


class TestVersionedWrites:
    @pytest.mark.asyncio
    async def test_conflict_after_max_attempts(self, locks: KeyedLocks) -> None:
        repo = AlwaysStaleUserRepository()
        store = UserMemoryStore("user-1", repo, locks)

        with pytest.raises(MemoryConflictError) as exc_info:
            await store.update_style_preferences(design_style="bold")

        assert exc_info.value.key == "user:user-1"
        assert exc_info.value.attempts == MAX_WRITE_ATTEMPTS
        assert repo.update_calls == MAX_WRITE_ATTEMPTS

    @pytest.mark.asyncio
    async def test_concurrent_writers_lose_nothing(self, user_store: UserMemoryStore) -> None:
        await asyncio.gather(*(
            user_store.learn_from_decision("picking colors", f"#00000{i}", field="color")
            for i in range(8)
        ))

        memory = await user_store.get_memory()
        assert len(memory.decision_history) == 8
        assert memory.version == 9

    @pytest.mark.asyncio
    async def test_stale_update_is_refused(self) -> None:
        repo = InMemoryUserMemoryRepository()
        record = await repo.get_or_create("user-1")

        assert await repo.update(record, expected_version=record.version) is not None
        assert await repo.update(record, expected_version=record.version) is None


# ---------------------------------------------------------------------------
# User tier
# ---------------------------------------------------------------------------


class TestUserMemoryStore:
    @pytest.mark.asyncio
    async def test_reading_does_not_create(self) -> None:
        repo = InMemoryUserMemoryRepository()
        store = UserMemoryStore("ghost", repo, KeyedLocks())

        memory = await store.get_memory()

        assert memory.user_id == "ghost"
        assert memory.style_preferences.design_style == "modern"
        assert await repo.get("ghost") is None

    @pytest.mark.asyncio
    async def test_partial_updates_merge(self, user_store: UserMemoryStore) -> None:
        await user_store.update_style_preferences(design_style="minimal")
        await user_store.update_style_preferences(preferred_colors=["#111111"])

        prefs = (await user_store.get_memory()).style_preferences
        assert prefs.design_style == "minimal"
        assert prefs.preferred_colors == ["#111111"]

    @pytest.mark.asyncio
    async def test_invalid_preference_is_rejected(self, user_store: UserMemoryStore) -> None:
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            await user_store.update_style_preferences(design_style="baroque")

    @pytest.mark.asyncio
    async def test_business_context_and_patterns(self, user_store: UserMemoryStore) -> None:
        await user_store.update_business_context(industries=["food"], brand_voice="friendly")
        await user_store.update_interaction_patterns(help_level="beginner")

        memory = await user_store.get_memory()
        assert memory.business_context.industries == ["food"]
        assert memory.business_context.brand_voice == "friendly"
        assert memory.interaction_patterns.help_level == "beginner"
        assert memory.interaction_patterns.response_style == "concise"

    @pytest.mark.asyncio
    async def test_infer_preferences_counts_color_decisions(self, user_store: UserMemoryStore) -> None:
        for color in ["#2563eb", "#dc2626", "#2563eb"]:
            await user_store.learn_from_decision("colors", color, field="color")
        await user_store.learn_from_decision("fonts", "Lato", field="font")

        assert await user_store.infer_preferences() == {"preferred_colors": ["#2563eb", "#dc2626"]}

    @pytest.mark.asyncio
    async def test_infer_preferences_without_history(self, user_store: UserMemoryStore) -> None:
        assert await user_store.infer_preferences() == {}


# ---------------------------------------------------------------------------
# Project tier
# ---------------------------------------------------------------------------


class TestProjectMemoryStore:
    @pytest.mark.asyncio
    async def test_business_details_skip_none(self, project_store: ProjectMemoryStore) -> None:
        await project_store.update_business_details(name="Acme", type="bakery")
        await project_store.update_business_details(name=None, description="Fresh bread")

        details = (await project_store.get_memory()).business_details
        assert details.name == "Acme"
        assert details.type == "bakery"
        assert details.description == "Fresh bread"

    @pytest.mark.asyncio
    async def test_design_decisions_are_bounded(self, project_store: ProjectMemoryStore) -> None:
        for i in range(52):
            await project_store.record_design_decision("color", before=i, after=i + 1)

        decisions = (await project_store.get_memory()).design_decisions
        assert len(decisions) == 50
        assert decisions[0].before == 2
        assert decisions[-1].after == 52

    @pytest.mark.asyncio
    async def test_content_history_is_bounded_per_section(self, project_store: ProjectMemoryStore) -> None:
        for i in range(22):
            await project_store.save_content_version("hero-1", {"title": f"v{i}"})
        await project_store.save_content_version("about-1", {"title": "only"})

        hero = await project_store.get_content_history("hero-1")
        assert len(hero) == 20
        assert {v.content["title"] for v in hero} == {f"v{i}" for i in range(2, 22)}
        assert len(await project_store.get_content_history("about-1")) == 1

    @pytest.mark.asyncio
    async def test_generated_content_cache(self, project_store: ProjectMemoryStore) -> None:
        await project_store.cache_generated_content("tagline", "Bread, better.")

        assert await project_store.get_cached_content("tagline") == "Bread, better."
        assert await project_store.get_cached_content("missing") is None

    @pytest.mark.asyncio
    async def test_goals(self, project_store: ProjectMemoryStore) -> None:
        goals = await project_store.set_site_goals([("Sell bread", "high"), ("Hire bakers", "low")])

        await project_store.update_goal_status(goals[0].id, "achieved")

        stored = (await project_store.get_memory()).site_goals
        assert [(g.goal, g.status) for g in stored] == [
            ("Sell bread", "achieved"),
            ("Hire bakers", "pending"),
        ]

    @pytest.mark.asyncio
    async def test_unknown_goal(self, project_store: ProjectMemoryStore) -> None:
        with pytest.raises(MemoryNotFoundError):
            await project_store.update_goal_status("nope", "achieved")

    @pytest.mark.asyncio
    async def test_discovered_info_merges(self, project_store: ProjectMemoryStore) -> None:
        await project_store.set_discovered_info(DiscoveredInfo(domain="acme.example"))
        await project_store.set_discovered_info(DiscoveredInfo(
            existing_website=ExistingWebsite(url="https://acme.example"),
        ))

        info = await project_store.get_discovered_info()
        assert info.domain == "acme.example"
        assert info.existing_website is not None
        assert info.existing_website.url == "https://acme.example"


# ---------------------------------------------------------------------------
# Session tier
# ---------------------------------------------------------------------------


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_active_session_is_reused(
        self, session_store: SessionMemoryStore, session_repo: InMemorySessionRepository, locks: KeyedLocks
    ) -> None:
        first = await session_store.get_or_create_session()

        other = SessionMemoryStore("proj-1", "user-1", session_repo, locks)
        assert await other.get_or_create_session() == first

    @pytest.mark.asyncio
    async def test_pausing_starts_a_new_session_next_time(self, session_store: SessionMemoryStore) -> None:
        first = await session_store.get_or_create_session()

        await session_store.pause_session()

        assert session_store.session_id is None
        second = await session_store.get_or_create_session()
        assert second != first
        paused = await session_store.list_sessions(SessionStatus.PAUSED)
        assert [s.id for s in paused] == [first]

    @pytest.mark.asyncio
    async def test_resume(self, session_store: SessionMemoryStore) -> None:
        first = await session_store.get_or_create_session()
        await session_store.complete_session()
        await session_store.get_or_create_session()

        await session_store.resume_session(first)

        assert session_store.session_id == first
        statuses = {s.id: s.status for s in await session_store.list_sessions()}
        assert statuses[first] == SessionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_resume_unknown(self, session_store: SessionMemoryStore) -> None:
        with pytest.raises(MemoryNotFoundError):
            await session_store.resume_session("missing")


class TestConversationHistory:
    @pytest.mark.asyncio
    async def test_limit_keeps_newest_oldest_first(self, session_store: SessionMemoryStore) -> None:
        for i in range(5):
            await session_store.add_message(MessageRole.USER, f"message {i}")

        history = await session_store.get_conversation_history(limit=3)

        assert [m.content for m in history] == ["message 2", "message 3", "message 4"]
        summaries = await session_store.list_sessions()
        assert summaries[0].message_count == 5

    @pytest.mark.asyncio
    async def test_message_metadata(self, session_store: SessionMemoryStore) -> None:
        await session_store.add_message(
            MessageRole.ASSISTANT,
            "Done",
            tool_calls=[{"name": "update_colors"}],
            tokens=42,
        )

        (message,) = await session_store.get_conversation_history()
        assert message.tool_calls == [{"name": "update_colors"}]
        assert message.actions == []
        assert message.tokens == 42


class TestTasks:
    @pytest.mark.asyncio
    async def test_sorted_by_priority(self, session_store: SessionMemoryStore) -> None:
        await session_store.add_task("write copy", priority=1)
        await session_store.add_task("fix colors", priority=5)
        await session_store.add_task("add FAQ", priority=3)

        assert [t.task for t in await session_store.get_tasks()] == ["fix colors", "add FAQ", "write copy"]

    @pytest.mark.asyncio
    async def test_complete_and_clear(self, session_store: SessionMemoryStore) -> None:
        done = await session_store.add_task("fix colors")
        await session_store.add_task("add FAQ")

        await session_store.update_task_status(done.id, SessionTaskStatus.COMPLETED)
        tasks = await session_store.get_tasks()
        assert next(t for t in tasks if t.id == done.id).completed_at is not None

        await session_store.clear_completed_tasks()
        assert [t.task for t in await session_store.get_tasks()] == ["add FAQ"]

    @pytest.mark.asyncio
    async def test_unknown_task(self, session_store: SessionMemoryStore) -> None:
        with pytest.raises(MemoryNotFoundError):
            await session_store.update_task_status("nope", SessionTaskStatus.BLOCKED)
        with pytest.raises(MemoryNotFoundError):
            await session_store.remove_task("nope")

    @pytest.mark.asyncio
    async def test_remove(self, session_store: SessionMemoryStore) -> None:
        task = await session_store.add_task("fix colors")
        await session_store.remove_task(task.id)
        assert await session_store.get_tasks() == []


class TestPendingQuestions:
    @pytest.mark.asyncio
    async def test_one_question_per_field(self, session_store: SessionMemoryStore) -> None:
        first = await session_store.add_pending_question("businessName", "What is it called?")
        again = await session_store.add_pending_question("businessName", "Name?")

        assert again.id == first.id
        assert again.question == "What is it called?"
        assert len(await session_store.get_pending_questions()) == 1

    @pytest.mark.asyncio
    async def test_resolve_by_id_and_field(self, session_store: SessionMemoryStore) -> None:
        q = await session_store.add_pending_question("businessName", "Name?")
        await session_store.add_pending_question("businessType", "Type?")

        await session_store.resolve_pending_question(q.id)
        await session_store.resolve_question_by_field("businessType")
        await session_store.resolve_question_by_field("nothing-here")

        assert await session_store.get_pending_questions() == []

    @pytest.mark.asyncio
    async def test_resolve_unknown_id(self, session_store: SessionMemoryStore) -> None:
        with pytest.raises(MemoryNotFoundError):
            await session_store.resolve_pending_question("nope")


class TestWipState:
    @pytest.mark.asyncio
    async def test_merge_and_clear(self, session_store: SessionMemoryStore) -> None:
        await session_store.set_wip_state(current_step="branding", partial_data={"businessName": "Acme"})
        await session_store.set_wip_state(pending_action="generate_defaults")

        wip = await session_store.get_wip_state()
        assert wip.current_step == "branding"
        assert wip.pending_action == "generate_defaults"
        assert wip.partial_data == {"businessName": "Acme"}

        await session_store.clear_wip_state()
        assert (await session_store.get_wip_state()).current_step is None
