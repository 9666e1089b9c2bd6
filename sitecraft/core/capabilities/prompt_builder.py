"""System prompt assembly for the AI webmaster.

Every builder here is a pure function of its arguments: the same inputs
always give the same prompt text.  Sections are rendered independently and
joined with a blank line; a section whose input is absent renders as ``""``
and is dropped.

Capability lines go through ``STATUS_FORMATTERS`` so each lifecycle status
has exactly one rendering rule (beta gets a badge, coming-soon moves to its
own list, deprecated disappears).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from sitecraft.core.capabilities.catalog import CAPABILITY_GROUPS
from sitecraft.core.capabilities.models import (
    Capability,
    CapabilityCategory,
    CapabilityGroup,
    CapabilityStatus,
)
from sitecraft.models.site import SiteState


@dataclass(frozen=True)
class BusinessInfo:
    name: str
    type: str
    description: str | None = None
    tagline: str | None = None


# ---------------------------------------------------------------------------
# Per-status capability formatters
# ---------------------------------------------------------------------------


def _format_active(cap: Capability) -> str:
    return f"- **{cap.name}**: {cap.description}"


def _format_beta(cap: Capability) -> str:
    return f"- **{cap.name}** (Beta): {cap.description}"


def _format_coming_soon(cap: Capability) -> str:
    return f"- {cap.name}: {cap.description}"


StatusFormatter = Callable[[Capability], str]

STATUS_FORMATTERS: dict[CapabilityStatus, StatusFormatter | None] = {
    CapabilityStatus.ACTIVE: _format_active,
    CapabilityStatus.BETA: _format_beta,
    CapabilityStatus.COMING_SOON: _format_coming_soon,
    CapabilityStatus.DEPRECATED: None,
}

# Statuses listed inside their capability group; the rest get their own block.
_GROUPED_STATUSES = frozenset({CapabilityStatus.ACTIVE, CapabilityStatus.BETA})


def format_capability(cap: Capability) -> str | None:
    """Render one capability line, or ``None`` when its status is never shown."""
    formatter = STATUS_FORMATTERS.get(cap.status)
    return formatter(cap) if formatter else None


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

IDENTITY_SECTION = """# AI Webmaster

You are an AI webmaster assistant for a website builder. You help users create and customize their websites through natural conversation.

Your role is to:
- Understand what the user wants to achieve
- Use the available tools to make changes to their website
- Explain what you're doing in clear, friendly language
- Suggest improvements when you see opportunities
- Be proactive but not overwhelming"""

INSTRUCTIONS_SECTION = """## How to Help Users

1. **Understand the Request**
   - Parse what the user wants to achieve
   - If unclear, ask for clarification
   - Consider the context of their business

2. **Take Action**
   - Use the appropriate tool to make changes
   - Make one logical change at a time
   - Confirm what you did after each action

3. **Be Proactive**
   - Suggest improvements when relevant
   - Point out opportunities to enhance the site
   - But don't overwhelm with too many suggestions

4. **Communicate Clearly**
   - Use simple, friendly language
   - Explain technical concepts when needed
   - Summarize changes in user-friendly terms

## Response Format

When you make changes:
1. Briefly acknowledge what the user asked for
2. Use the appropriate tool to make the change
3. Confirm what was done
4. Optionally suggest related improvements

When you can't do something:
1. Explain why (feature coming soon, requires upgrade, etc.)
2. Suggest alternatives if available
3. Be helpful and positive"""

COMING_SOON_INSTRUCTION = (
    "For these features, acknowledge the user's request and let them know it's coming soon."
)


def build_capabilities_section(
    capabilities: Iterable[Capability],
    groups: Iterable[CapabilityGroup] = CAPABILITY_GROUPS,
) -> str:
    caps = list(capabilities)
    by_category: dict[CapabilityCategory, list[Capability]] = {}
    for cap in caps:
        by_category.setdefault(cap.category, []).append(cap)

    lines = ["## Your Capabilities", "", "You can help users with the following:"]

    for group in groups:
        group_lines = [
            line
            for category in group.categories
            for cap in by_category.get(category, [])
            if cap.status in _GROUPED_STATUSES
            and (line := format_capability(cap)) is not None
        ]
        if not group_lines:
            continue
        lines.append("")
        lines.append(f"### {group.name}")
        lines.extend(group_lines)

    coming_soon = [
        line
        for cap in caps
        if cap.status == CapabilityStatus.COMING_SOON
        and (line := format_capability(cap)) is not None
    ]
    if coming_soon:
        lines.append("")
        lines.append("### Coming Soon")
        lines.extend(coming_soon)
        lines.append("")
        lines.append(COMING_SOON_INSTRUCTION)

    return "\n".join(lines)


def build_site_state_section(site_state: SiteState | None) -> str:
    if site_state is None:
        return ""

    section_lines = [f'  - {s.type.value}: "{s.title}"' for s in site_state.sections]
    styles = site_state.styles
    style_lines = [
        f"- Primary Color: {styles.primary_color}",
        f"- Secondary Color: {styles.secondary_color}",
    ]
    if styles.accent_color:
        style_lines.append(f"- Accent Color: {styles.accent_color}")
    if styles.heading_font:
        style_lines.append(f"- Heading Font: {styles.heading_font}")
    if styles.body_font:
        style_lines.append(f"- Body Font: {styles.body_font}")

    parts = [
        "## Current Website State",
        "",
        f"### Sections ({len(site_state.sections)} total)",
        "\n".join(section_lines) if section_lines else "  No sections yet",
        "",
        "### Styles",
        *style_lines,
        "",
        "### Page Meta",
        f"- Title: {site_state.meta.title}",
        f"- Description: {site_state.meta.description}",
        "",
        "Use this information to understand the current state and make appropriate changes.",
    ]
    return "\n".join(parts)


def build_business_section(business_info: BusinessInfo | None) -> str:
    if business_info is None:
        return ""

    lines = [
        "## Business Information",
        "",
        f"- **Name:** {business_info.name}",
        f"- **Type:** {business_info.type}",
    ]
    if business_info.description:
        lines.append(f"- **Description:** {business_info.description}")
    lines.append("")
    lines.append("Keep the business context in mind when generating content or making suggestions.")
    return "\n".join(lines)


def build_tool_usage_section(capabilities: Iterable[Capability]) -> str:
    tool_caps = [
        c for c in capabilities
        if c.tool_name and c.status in _GROUPED_STATUSES
    ]
    if not tool_caps:
        return ""

    by_category: dict[CapabilityCategory, list[Capability]] = {}
    for cap in tool_caps:
        by_category.setdefault(cap.category, []).append(cap)

    lines = ["## Tool Usage Guidelines"]
    for category, caps in by_category.items():
        label = category.value[:1].upper() + category.value[1:]
        lines.append("")
        lines.append(f"### {label} Tools")
        for cap in caps:
            lines.append("")
            lines.append(f"**{cap.tool_name}**")
            lines.append(f"Use when: {', '.join(cap.triggers[:3])}")
            if cap.examples:
                lines.append("Examples:")
                lines.extend(f'  - "{example}"' for example in cap.examples[:2])
    return "\n".join(lines)


def build_system_prompt(
    capabilities: Iterable[Capability],
    site_state: SiteState | None = None,
    business_info: BusinessInfo | None = None,
    memory_section: str = "",
    additional_context: str | None = None,
    groups: Iterable[CapabilityGroup] = CAPABILITY_GROUPS,
) -> str:
    """Assemble the full system prompt for one command turn."""
    caps = list(capabilities)
    sections = [
        IDENTITY_SECTION,
        build_capabilities_section(caps, groups),
        build_site_state_section(site_state),
        build_business_section(business_info),
        memory_section.strip(),
        INSTRUCTIONS_SECTION,
        build_tool_usage_section(caps),
        f"## Additional Context\n{additional_context}" if additional_context else "",
    ]
    return "\n\n".join(s for s in sections if s)


# ---------------------------------------------------------------------------
# Task-specific prompts
# ---------------------------------------------------------------------------


def build_onboarding_suggestion_prompt(
    field: str,
    current_value: str,
    business: BusinessInfo,
) -> str:
    lines = [
        f'You are helping a user set up their website for "{business.name}", '
        f"a {business.type} business.",
        "",
    ]
    if business.description:
        lines.append(f"Business description: {business.description}")
        lines.append("")
    lines.append(f'The user needs help with the "{field}" field.')
    lines.append(
        f'Current value: "{current_value}"' if current_value else "This field is currently empty."
    )
    lines.extend([
        "",
        "Provide 3 suggestions for this field that would work well for this type of business. "
        "Each suggestion should be:",
        "- Professional and compelling",
        "- Appropriate for the business type",
        "- Unique and creative",
        "",
        "Return only the suggestions, one per line, no numbering or extra text.",
    ])
    return "\n".join(lines)


def build_site_generation_prompt(business: BusinessInfo, section_types: Iterable[str]) -> str:
    """Copywriting prompt asking for a whole site's content as one JSON object."""
    header = [f"Business Name: {business.name}"]
    if business.tagline:
        header.append(f"Tagline: {business.tagline}")
    header.append(f"Business Type: {business.type}")
    header.append(f"Description: {business.description or ''}")
    business_block = "\n".join(header)
    sections = ", ".join(section_types)

    return f"""You are an expert website copywriter. Generate compelling website content for the following business:

{business_block}

Generate content for these website sections: {sections}

Return a JSON object with this exact structure:
{{
  "meta": {{
    "title": "SEO-optimized page title (60 chars max)",
    "description": "SEO meta description (160 chars max)"
  }},
  "sections": [
    {{
      "type": "section_type",
      "title": "Section heading",
      "subtitle": "Optional subtitle",
      "content": "Main paragraph content",
      "items": [
        {{
          "title": "Item title",
          "description": "Item description",
          "icon": "emoji icon",
          "price": "optional price"
        }}
      ],
      "cta": {{
        "text": "Button text",
        "url": "#contact"
      }}
    }}
  ]
}}

Guidelines:
- Write in a professional but engaging tone
- Be specific to the business described
- For the hero section: create a compelling headline and subheadline
- For about section: tell the business story
- For features/services: create 3-4 key points
- For menu (restaurants): create 4-6 sample items with descriptions and prices
- For portfolio: describe 3-4 project categories
- For testimonials: create 3 realistic customer quotes with names
- For team: create 2-3 team member descriptions
- For contact: create an inviting call to action
- Use relevant emojis for icons

Return ONLY valid JSON, no markdown or explanation."""
