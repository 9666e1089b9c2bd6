"""Response models for the SiteCraft API."""
from __future__ import annotations

from pydantic import Field, JsonValue

from sitecraft.models.base import CamelModel
from sitecraft.models.site import SectionContent, SiteState


class MatchedCapability(CamelModel):
    id: str
    name: str
    confidence: float
    matched_triggers: list[str]


class CommandResponse(CamelModel):
    """Reply to one chat command.

    ``blocks`` is the full section list after the turn, present only when at
    least one action changed the site.
    """

    response: str
    blocks: list[SectionContent] | None = None
    actions: list[dict[str, JsonValue]] = Field(default_factory=list)
    matched_capabilities: list[MatchedCapability] = Field(default_factory=list)


class DefaultsResponse(CamelModel):
    primary_color: str
    secondary_color: str
    heading_font: str
    body_font: str
    site_goals: list[str]
    selected_sections: list[str]


class QuestionResponse(CamelModel):
    field: str
    question: str
    options: list[str] | None = None
    context: str | None = None


class StepValidationResponse(CamelModel):
    is_valid: bool
    missing_fields: list[str]
    suggestions: dict[str, JsonValue]
    questions: list[QuestionResponse]


class SaveDiscoveryResponse(CamelModel):
    success: bool
    message: str


class SuggestResponse(CamelModel):
    suggestions: list[str]


class GenerateResponse(CamelModel):
    site: SiteState
