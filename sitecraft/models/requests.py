"""Request models for the SiteCraft API."""
from __future__ import annotations

from typing import Literal

from pydantic import Field, JsonValue

from sitecraft.models.base import CamelModel

_MAX_COMMAND_LENGTH = 4000


class HistoryMessage(CamelModel):
    """One prior chat turn supplied by the editor."""

    role: Literal["user", "assistant", "system"]
    content: str


class BlockRef(CamelModel):
    """A block currently rendered in the editor."""

    id: str
    block_type: str
    variant: str | None = None


class CommandContext(CamelModel):
    selected_block_id: str | None = None
    current_blocks: list[BlockRef] = Field(default_factory=list)


class CommandRequest(CamelModel):
    """Request to apply a natural-language command to a project's site."""

    project_id: str = Field(..., min_length=1)
    command: str = Field(
        ...,
        min_length=1,
        max_length=_MAX_COMMAND_LENGTH,
        description="What the user wants changed, in their own words",
        examples=["Add a testimonials section after the hero"],
    )
    history: list[HistoryMessage] | None = Field(
        default=None,
        description="Prior turns; when omitted the stored session history is used",
    )
    context: CommandContext | None = None


PipelineAction = Literal["get_defaults", "validate_step", "save_discovery"]


class PipelineRequest(CamelModel):
    """Onboarding pipeline request.

    ``action`` stays a plain string so unknown actions reach the handler and
    get a 400 instead of a validation error.
    """

    action: str
    data: dict[str, JsonValue] = Field(default_factory=dict)


class BusinessContext(CamelModel):
    type: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None


class SuggestRequest(CamelModel):
    """Ask for ideas for one onboarding field."""

    field: str = Field(..., min_length=1, examples=["businessTagline"])
    current_value: str = ""
    business_context: BusinessContext


_HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class GenerateRequest(CamelModel):
    """Generate the first draft of a project's site from its business basics."""

    project_id: str = Field(..., min_length=1)
    business_name: str = Field(..., min_length=1)
    business_type: str = "business"
    business_description: str = ""
    business_tagline: str | None = None
    primary_color: str | None = Field(default=None, pattern=_HEX_COLOR_PATTERN)
    secondary_color: str | None = Field(default=None, pattern=_HEX_COLOR_PATTERN)
