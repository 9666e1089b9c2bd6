"""Site-editing tool definitions (OpenAI function-calling format).

These are the tools the model may call during a command turn.  Each one
has a matching typed payload in ``sitecraft.core.actions.payloads`` and a
handler in ``ActionExecutor``; the schemas here only guide the model, the
payload models are what actually validate arguments.
"""
from __future__ import annotations

from typing import Iterable

from sitecraft.contracts.llm_types import ToolSchemaDict
from sitecraft.core.capabilities.models import Capability
from sitecraft.models.site import SectionType

SECTION_POSITIONS: tuple[str, ...] = ("start", "end", "after_hero", "before_contact")

_SECTION_TYPES: list[str] = [t.value for t in SectionType]

SITE_TOOLS: list[ToolSchemaDict] = [
    {
        "type": "function",
        "function": {
            "name": "add_section",
            "description": (
                "Add a new section to the website. Use this when the user wants to add "
                "content like testimonials, features, team members, etc."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "section_type": {
                        "type": "string",
                        "description": "The type of section to add",
                        "enum": _SECTION_TYPES,
                    },
                    "position": {
                        "type": "string",
                        "description": "Where to place the section",
                        "enum": list(SECTION_POSITIONS),
                    },
                    "content": {
                        "type": "object",
                        "description": "The content for the section",
                        "properties": {
                            "title": {"type": "string", "description": "Section title"},
                            "subtitle": {"type": "string", "description": "Section subtitle"},
                            "content": {"type": "string", "description": "Body text"},
                            "items": {
                                "type": "array",
                                "description": "Items for the section (testimonials, features, etc.)",
                            },
                        },
                    },
                },
                "required": ["section_type"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "remove_section",
            "description": "Remove a section from the website",
            "parameters": {
                "type": "object",
                "properties": {
                    "section_id": {"type": "string", "description": "The ID of the section to remove"},
                    "section_type": {
                        "type": "string",
                        "description": "The type of section to remove (if ID not known)",
                        "enum": _SECTION_TYPES,
                    },
                },
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "edit_section",
            "description": "Edit an existing section's content or styling",
            "parameters": {
                "type": "object",
                "properties": {
                    "section_id": {"type": "string", "description": "The ID of the section to edit"},
                    "section_type": {
                        "type": "string",
                        "description": "The type of section to edit (if ID not known)",
                        "enum": _SECTION_TYPES,
                    },
                    "updates": {
                        "type": "object",
                        "description": "The updates to apply",
                        "properties": {
                            "title": {"type": "string", "description": "New title"},
                            "subtitle": {"type": "string", "description": "New subtitle"},
                            "content": {"type": "string", "description": "New content text"},
                            "items": {"type": "array", "description": "New items array"},
                        },
                    },
                },
                "required": ["updates"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "reorder_sections",
            "description": "Change the order of sections on the page",
            "parameters": {
                "type": "object",
                "properties": {
                    "section_order": {
                        "type": "array",
                        "description": "Array of section IDs in the new order",
                        "items": {"type": "string"},
                    },
                },
                "required": ["section_order"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "update_colors",
            "description": "Change the website's color scheme",
            "parameters": {
                "type": "object",
                "properties": {
                    "primary_color": {"type": "string", "description": "Primary brand color (hex code)"},
                    "secondary_color": {"type": "string", "description": "Secondary color (hex code)"},
                    "accent_color": {"type": "string", "description": "Accent color for highlights (hex code)"},
                },
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "update_fonts",
            "description": "Change the website's typography",
            "parameters": {
                "type": "object",
                "properties": {
                    "heading_font": {"type": "string", "description": "Font family for headings"},
                    "body_font": {"type": "string", "description": "Font family for body text"},
                },
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "update_seo",
            "description": "Update SEO meta tags and settings",
            "parameters": {
                "type": "object",
                "properties": {
                    "page_title": {
                        "type": "string",
                        "description": "Page title for browser tab and search results",
                    },
                    "meta_description": {
                        "type": "string",
                        "description": "Meta description for search results",
                    },
                    "keywords": {
                        "type": "array",
                        "description": "Target keywords",
                        "items": {"type": "string"},
                    },
                },
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_site_info",
            "description": "Get information about the current website state",
            "parameters": {
                "type": "object",
                "properties": {
                    "include": {
                        "type": "array",
                        "description": "What information to include",
                        "items": {"type": "string"},
                    },
                },
                "required": [],
            },
        },
    },
]

SITE_TOOL_NAMES: frozenset[str] = frozenset(t["function"]["name"] for t in SITE_TOOLS)


def tools_for_capabilities(capabilities: Iterable[Capability]) -> list[ToolSchemaDict]:
    """Schemas for the executable tools backing *capabilities*, in catalog tool order."""
    wanted = {c.tool_name for c in capabilities if c.tool_name}
    return [t for t in SITE_TOOLS if t["function"]["name"] in wanted]
