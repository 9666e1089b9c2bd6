"""Tests for system prompt assembly."""
from __future__ import annotations

from sitecraft.core.capabilities import (
    Capability,
    CapabilityCategory,
    CapabilityStatus,
    UserContext,
    get_capability_registry,
)
from sitecraft.core.capabilities.prompt_builder import (
    BusinessInfo,
    STATUS_FORMATTERS,
    build_business_section,
    build_capabilities_section,
    build_onboarding_suggestion_prompt,
    build_site_generation_prompt,
    build_site_state_section,
    build_system_prompt,
    build_tool_usage_section,
    format_capability,
)
from sitecraft.models.site import SiteState


def _cap(cap_id: str, status: CapabilityStatus, category=CapabilityCategory.DESIGN) -> Capability:
    return Capability(
        id=cap_id,
        name=cap_id.title(),
        description=f"{cap_id} things",
        category=category,
        status=status,
        triggers=(cap_id,),
        tool_name=cap_id,
        examples=(f"Please {cap_id}",),
    )


class TestStatusFormatters:
    def test_every_status_has_an_entry(self) -> None:
        assert set(STATUS_FORMATTERS) == set(CapabilityStatus)

    def test_beta_badge(self) -> None:
        line = format_capability(_cap("paint", CapabilityStatus.BETA))
        assert line == "- **Paint** (Beta): paint things"

    def test_deprecated_is_never_rendered(self) -> None:
        assert format_capability(_cap("paint", CapabilityStatus.DEPRECATED)) is None


class TestCapabilitiesSection:
    def test_groups_and_coming_soon_block(self) -> None:
        section = build_capabilities_section([
            _cap("paint", CapabilityStatus.ACTIVE),
            _cap("sculpt", CapabilityStatus.COMING_SOON),
            _cap("etch", CapabilityStatus.DEPRECATED),
        ])

        assert section.startswith("## Your Capabilities")
        assert "### Design\n- **Paint**: paint things" in section
        assert "### Coming Soon\n- Sculpt: sculpt things" in section
        assert "coming soon" in section
        assert "Etch" not in section

    def test_empty_groups_are_skipped(self) -> None:
        section = build_capabilities_section([_cap("paint", CapabilityStatus.ACTIVE)])

        assert "### Design" in section
        assert "### Content" not in section
        assert "### Coming Soon" not in section


class TestSiteStateSection:
    def test_none_renders_nothing(self) -> None:
        assert build_site_state_section(None) == ""

    def test_lists_sections_and_styles(self, site_state: SiteState) -> None:
        section = build_site_state_section(site_state)

        assert "### Sections (4 total)" in section
        assert '  - hero: "Hero"' in section
        assert "- Primary Color: #2563eb" in section
        assert "Accent Color" not in section
        assert "- Title: Acme Bakery" in section

    def test_empty_site(self, make_site) -> None:
        assert "No sections yet" in build_site_state_section(make_site())


class TestBusinessSection:
    def test_none_renders_nothing(self) -> None:
        assert build_business_section(None) == ""

    def test_description_is_optional(self) -> None:
        section = build_business_section(BusinessInfo(name="Acme", type="restaurant"))

        assert "- **Name:** Acme" in section
        assert "- **Type:** restaurant" in section
        assert "Description" not in section


class TestToolUsageSection:
    def test_only_offered_tools(self) -> None:
        section = build_tool_usage_section([
            _cap("paint", CapabilityStatus.ACTIVE),
            _cap("sculpt", CapabilityStatus.COMING_SOON),
        ])

        assert "**paint**" in section
        assert "sculpt" not in section
        assert '  - "Please paint"' in section

    def test_nothing_to_say(self) -> None:
        assert build_tool_usage_section([_cap("sculpt", CapabilityStatus.COMING_SOON)]) == ""


class TestBuildSystemPrompt:
    def test_deterministic(self, site_state: SiteState) -> None:
        caps = get_capability_registry().prompt_capabilities(UserContext())
        business = BusinessInfo(name="Acme", type="restaurant", description="Bakery")

        first = build_system_prompt(caps, site_state, business, "## Memory")
        second = build_system_prompt(caps, site_state, business, "## Memory")

        assert first == second

    def test_section_order(self, site_state: SiteState) -> None:
        caps = get_capability_registry().prompt_capabilities(UserContext())
        prompt = build_system_prompt(
            caps,
            site_state=site_state,
            business_info=BusinessInfo(name="Acme", type="restaurant"),
            memory_section="\n# AI Memory Context\n\n## Project Context\n- Business name: Acme",
            additional_context="The user has selected the hero.",
        )

        markers = [
            "# AI Webmaster",
            "## Your Capabilities",
            "## Current Website State",
            "## Business Information",
            "# AI Memory Context",
            "## How to Help Users",
            "## Tool Usage Guidelines",
            "## Additional Context\nThe user has selected the hero.",
        ]
        positions = [prompt.index(m) for m in markers]
        assert positions == sorted(positions)

    def test_absent_parts_are_dropped(self) -> None:
        prompt = build_system_prompt([_cap("paint", CapabilityStatus.ACTIVE)])

        assert "## Current Website State" not in prompt
        assert "## Business Information" not in prompt
        assert "## Additional Context" not in prompt
        assert "\n\n\n" not in prompt


class TestTaskPrompts:
    def test_onboarding_suggestion(self) -> None:
        prompt = build_onboarding_suggestion_prompt(
            "businessTagline", "", BusinessInfo(name="Acme", type="restaurant"),
        )

        assert '"Acme", a restaurant business' in prompt
        assert "This field is currently empty." in prompt

    def test_onboarding_suggestion_with_current_value(self) -> None:
        prompt = build_onboarding_suggestion_prompt(
            "businessTagline",
            "Bread, better.",
            BusinessInfo(name="Acme", type="restaurant", description="A corner bakery"),
        )

        assert 'Current value: "Bread, better."' in prompt
        assert "Business description: A corner bakery" in prompt

    def test_site_generation(self) -> None:
        prompt = build_site_generation_prompt(
            BusinessInfo(name="Acme", type="restaurant", description="A corner bakery", tagline="Bread, better."),
            ["hero", "menu", "contact"],
        )

        assert "Business Name: Acme\nTagline: Bread, better.\nBusiness Type: restaurant" in prompt
        assert "Generate content for these website sections: hero, menu, contact" in prompt
        assert '"meta": {' in prompt
        assert prompt.endswith("Return ONLY valid JSON, no markdown or explanation.")

    def test_site_generation_without_tagline(self) -> None:
        prompt = build_site_generation_prompt(BusinessInfo(name="Acme", type="blog"), ["hero"])

        assert "Tagline" not in prompt
        assert "Description: \n" in prompt
