"""Site-mutating actions: typed tool-call payloads and their executor."""
from __future__ import annotations

from sitecraft.core.actions.executor import ActionExecutor, ActionResult
from sitecraft.core.actions.payloads import (
    ACTION_NAMES,
    ActionPayload,
    AddSectionArgs,
    EditSectionArgs,
    GetSiteInfoArgs,
    RemoveSectionArgs,
    ReorderSectionsArgs,
    ToolCall,
    UpdateColorsArgs,
    UpdateFontsArgs,
    UpdateSeoArgs,
    parse_tool_call,
)

__all__ = [
    "ACTION_NAMES",
    "ActionExecutor",
    "ActionPayload",
    "ActionResult",
    "AddSectionArgs",
    "EditSectionArgs",
    "GetSiteInfoArgs",
    "RemoveSectionArgs",
    "ReorderSectionsArgs",
    "ToolCall",
    "UpdateColorsArgs",
    "UpdateFontsArgs",
    "UpdateSeoArgs",
    "parse_tool_call",
]
