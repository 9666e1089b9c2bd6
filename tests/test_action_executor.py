"""Tests for ActionExecutor: applying tool calls to a SiteState."""
from __future__ import annotations

import pytest

from sitecraft.core.actions.executor import ActionExecutor, ActionResult
from sitecraft.core.actions.payloads import ToolCall
from sitecraft.models.site import SectionType, SiteState

FROZEN_MS = 1_700_000_000_000


def _executor(state: SiteState) -> ActionExecutor:
    return ActionExecutor(state, clock=lambda: FROZEN_MS / 1000)


def _types(state: SiteState) -> list[str]:
    return [s.type.value for s in state.sections]


# ---------------------------------------------------------------------------
# add_section
# ---------------------------------------------------------------------------


class TestAddSection:
    @pytest.mark.asyncio
    async def test_after_hero_inserts_directly_after_hero(self, site_state: SiteState) -> None:
        """Testimonials requested after the hero land at index 1."""
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="add_section",
            arguments={"section_type": "testimonials", "position": "after_hero"},
        ))

        assert result.success is True
        assert result.description == "Added testimonials section"
        state = executor.get_state()
        assert _types(state) == ["hero", "testimonials", "features", "pricing", "contact"]
        added = state.sections[1]
        assert added.id == f"section_{FROZEN_MS}"
        assert added.title == "What Our Customers Say"
        assert result.changes is not None
        assert result.changes["section"]["id"] == added.id

    @pytest.mark.asyncio
    async def test_after_hero_without_hero_inserts_at_start(self, make_site) -> None:
        executor = _executor(make_site(SectionType.FEATURES, SectionType.CONTACT))

        await executor.execute(ToolCall(
            name="add_section",
            arguments={"section_type": "faq", "position": "after_hero"},
        ))

        assert _types(executor.get_state()) == ["faq", "features", "contact"]

    @pytest.mark.asyncio
    async def test_before_contact(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        await executor.execute(ToolCall(
            name="add_section",
            arguments={"section_type": "team", "position": "before_contact"},
        ))

        assert _types(executor.get_state()) == ["hero", "features", "pricing", "team", "contact"]

    @pytest.mark.asyncio
    async def test_before_contact_without_contact_appends(self, make_site) -> None:
        executor = _executor(make_site(SectionType.HERO))

        await executor.execute(ToolCall(
            name="add_section",
            arguments={"section_type": "team", "position": "before_contact"},
        ))

        assert _types(executor.get_state()) == ["hero", "team"]

    @pytest.mark.asyncio
    async def test_start_and_default_end(self, make_site) -> None:
        executor = _executor(make_site(SectionType.HERO))

        await executor.execute(ToolCall(
            name="add_section", arguments={"section_type": "cta", "position": "start"},
        ))
        await executor.execute(ToolCall(name="add_section", arguments={"section_type": "blog"}))

        assert _types(executor.get_state()) == ["cta", "hero", "blog"]

    @pytest.mark.asyncio
    async def test_ids_stay_unique_within_one_millisecond(self, make_site) -> None:
        executor = _executor(make_site())

        await executor.execute(ToolCall(name="add_section", arguments={"section_type": "faq"}))
        await executor.execute(ToolCall(name="add_section", arguments={"section_type": "faq"}))

        ids = executor.get_state().section_ids()
        assert ids == [f"section_{FROZEN_MS}", f"section_{FROZEN_MS}_1"]

    @pytest.mark.asyncio
    async def test_content_and_items(self, make_site) -> None:
        executor = _executor(make_site())

        await executor.execute(ToolCall(
            name="add_section",
            arguments={
                "section_type": "pricing",
                "content": {
                    "title": "Plans",
                    "items": [
                        {"title": "Basic", "description": "For starters", "price": "$9"},
                        {"id": "pro", "title": "Pro", "price": "$29"},
                    ],
                },
            },
        ))

        section = executor.get_state().sections[0]
        assert section.title == "Plans"
        assert section.items is not None
        assert [i.id for i in section.items] == [f"section_{FROZEN_MS}_item_0", "pro"]
        assert section.items[1].description == ""


# ---------------------------------------------------------------------------
# remove / edit / reorder
# ---------------------------------------------------------------------------


class TestRemoveSection:
    @pytest.mark.asyncio
    async def test_remove_by_type(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="remove_section", arguments={"section_type": "pricing"},
        ))

        assert result.success is True
        assert result.description == "Removed pricing section"
        assert _types(executor.get_state()) == ["hero", "features", "contact"]

    @pytest.mark.asyncio
    async def test_remove_missing_section_fails_and_keeps_state(
        self, site_without_pricing: SiteState
    ) -> None:
        """Removing pricing from a site without one reports the miss."""
        executor = _executor(site_without_pricing)
        before = executor.get_state().model_dump()

        result = await executor.execute(ToolCall(
            name="remove_section", arguments={"section_type": "pricing"},
        ))

        assert result.success is False
        assert result.error == "Could not find section to remove"
        assert executor.get_state().model_dump() == before

    @pytest.mark.asyncio
    async def test_id_wins_over_type(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        await executor.execute(ToolCall(
            name="remove_section",
            arguments={"section_id": "contact-1", "section_type": "hero"},
        ))

        assert _types(executor.get_state()) == ["hero", "features", "pricing"]


class TestEditSection:
    @pytest.mark.asyncio
    async def test_only_sent_fields_change(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="edit_section",
            arguments={"section_id": "hero-1", "updates": {"subtitle": "Baked daily"}},
        ))

        assert result.success is True
        hero = executor.get_state().sections[0]
        assert hero.title == "Hero"
        assert hero.subtitle == "Baked daily"
        assert result.changes is not None
        assert result.changes["updates"] == {"subtitle": "Baked daily"}

    @pytest.mark.asyncio
    async def test_cannot_change_id_or_type(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        await executor.execute(ToolCall(
            name="edit_section",
            arguments={
                "section_type": "hero",
                "updates": {"id": "other", "type": "faq", "title": "Hello"},
            },
        ))

        hero = executor.get_state().sections[0]
        assert hero.id == "hero-1"
        assert hero.type == SectionType.HERO
        assert hero.title == "Hello"

    @pytest.mark.asyncio
    async def test_missing_section(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="edit_section",
            arguments={"section_type": "faq", "updates": {"title": "Q&A"}},
        ))

        assert result.success is False
        assert result.error == "Could not find section to edit"


class TestReorderSections:
    @pytest.mark.asyncio
    async def test_unlisted_sections_keep_relative_order_at_end(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="reorder_sections",
            arguments={"section_order": ["contact-1", "hero-1", "bogus", "contact-1"]},
        ))

        assert result.success is True
        expected = ["contact-1", "hero-1", "features-1", "pricing-1"]
        assert executor.get_state().section_ids() == expected
        assert result.changes == {"newOrder": expected}

    @pytest.mark.asyncio
    async def test_section_set_is_preserved(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        await executor.execute(ToolCall(
            name="reorder_sections", arguments={"section_order": ["pricing-1"]},
        ))

        assert sorted(executor.get_state().section_ids()) == sorted(site_state.section_ids())


# ---------------------------------------------------------------------------
# Styles, SEO, site info
# ---------------------------------------------------------------------------


class TestStyleActions:
    @pytest.mark.asyncio
    async def test_update_colors_reports_only_given_fields(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="update_colors", arguments={"primary_color": "#16a34a"},
        ))

        assert result.changes == {"primaryColor": "#16a34a"}
        styles = executor.get_state().styles
        assert styles.primary_color == "#16a34a"
        assert styles.secondary_color == "#1e293b"

    @pytest.mark.asyncio
    async def test_update_fonts(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="update_fonts",
            arguments={"heading_font": "Playfair Display", "body_font": "Lato"},
        ))

        assert result.description == "Updated typography"
        assert result.changes == {"headingFont": "Playfair Display", "bodyFont": "Lato"}

    @pytest.mark.asyncio
    async def test_update_seo_ignores_keywords(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="update_seo",
            arguments={"page_title": "Acme | Bread", "keywords": ["bread", "bakery"]},
        ))

        assert result.changes == {"title": "Acme | Bread"}
        meta = executor.get_state().meta
        assert meta.title == "Acme | Bread"
        assert meta.description == "Fresh bread every morning"

    @pytest.mark.asyncio
    async def test_get_site_info_does_not_change_state(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(name="get_site_info"))

        assert result.success is True
        assert result.changes is not None
        assert result.changes["sectionCount"] == 4
        assert result.changes["sectionTypes"] == ["hero", "features", "pricing", "contact"]
        assert executor.get_state() == site_state


# ---------------------------------------------------------------------------
# Failures and batches
# ---------------------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    async def test_unknown_action(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(name="launch_rocket"))

        assert result == ActionResult(
            success=False,
            action="launch_rocket",
            description="Unknown action: launch_rocket",
            error="Action not implemented",
        )

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        result = await executor.execute(ToolCall(
            name="add_section", arguments={"section_type": "carousel"},
        ))

        assert result.success is False
        assert result.description == "Invalid arguments for add_section"
        assert result.error is not None and "section_type" in result.error
        assert executor.get_state() == site_state

    @pytest.mark.asyncio
    async def test_input_state_is_never_mutated(self, site_state: SiteState) -> None:
        snapshot = site_state.model_dump()
        executor = _executor(site_state)

        await executor.execute(ToolCall(name="remove_section", arguments={"section_type": "hero"}))

        assert site_state.model_dump() == snapshot
        assert len(executor.get_state().sections) == 3


class TestExecuteAll:
    @pytest.mark.asyncio
    async def test_later_calls_see_earlier_ones(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        results = await executor.execute_all([
            ToolCall(name="add_section", arguments={"section_type": "faq"}),
            ToolCall(
                name="edit_section",
                arguments={"section_id": f"section_{FROZEN_MS}", "updates": {"title": "Questions"}},
            ),
        ])

        assert [r.success for r in results] == [True, True]
        assert executor.get_state().sections[-1].title == "Questions"

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_the_batch(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        results = await executor.execute_all([
            ToolCall(name="remove_section", arguments={"section_type": "faq"}),
            ToolCall(name="update_colors", arguments={"accent_color": "#f59e0b"}),
        ])

        assert [r.success for r in results] == [False, True]
        assert executor.get_state().styles.accent_color == "#f59e0b"

    @pytest.mark.asyncio
    async def test_pending_changes(self, site_state: SiteState) -> None:
        executor = _executor(site_state)

        await executor.execute_all([ToolCall(name="get_site_info")])
        assert len(executor.get_pending_changes()) == 1

        executor.clear_pending_changes()
        assert executor.get_pending_changes() == []

    def test_result_to_dict_omits_absent_fields(self) -> None:
        result = ActionResult(success=True, action="get_site_info", description="ok")
        assert result.to_dict() == {"success": True, "action": "get_site_info", "description": "ok"}
