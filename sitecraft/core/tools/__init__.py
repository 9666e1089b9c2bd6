"""Tool schemas exposed to the model."""
from __future__ import annotations

from sitecraft.core.tools.site_tools import (
    SECTION_POSITIONS,
    SITE_TOOL_NAMES,
    SITE_TOOLS,
    tools_for_capabilities,
)

__all__ = ["SECTION_POSITIONS", "SITE_TOOL_NAMES", "SITE_TOOLS", "tools_for_capabilities"]
