"""Memory tier data models.

Three tiers, each persisted as one versioned record:

- **User** (``UserMemoryData``): style preferences, business context,
  interaction patterns and a bounded decision history.  Follows the user
  across projects.
- **Project** (``ProjectMemoryData``): business details, design decisions,
  per-section content history, generated-content cache, site goals and
  discovered info.
- **Session** (``ChatSessionRecord``): the current chat session's tasks,
  pending questions and work-in-progress snapshot, plus its messages.

``version`` starts at 0 for a record that has never been stored and is
bumped by the repository on every successful write.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import Field, JsonValue

from sitecraft.models.base import CamelModel

MAX_DECISION_HISTORY = 100
MAX_DESIGN_DECISIONS = 50
MAX_CONTENT_VERSIONS_PER_SECTION = 20


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VersionedModel(CamelModel):
    """A record stored with compare-and-swap on ``version``."""

    version: int = 0


# ---------------------------------------------------------------------------
# User tier
# ---------------------------------------------------------------------------

DesignStyle = Literal["modern", "classic", "minimal", "bold"]
BrandVoice = Literal["professional", "friendly", "casual", "formal"]


class FontPair(CamelModel):
    heading: str = "Inter"
    body: str = "Inter"


class LayoutPreferences(CamelModel):
    header_style: Literal["centered", "left-aligned", "logo-left"] | None = None
    footer_complexity: Literal["simple", "detailed"] | None = None


class StylePreferences(CamelModel):
    preferred_colors: list[str] = Field(default_factory=list)
    preferred_fonts: FontPair = Field(default_factory=FontPair)
    design_style: DesignStyle = "modern"
    layout_preferences: LayoutPreferences | None = None


class BusinessContext(CamelModel):
    industries: list[str] = Field(default_factory=list)
    brand_voice: BrandVoice = "professional"
    target_audience: list[str] | None = None
    common_goals: list[str] | None = None


class InteractionPatterns(CamelModel):
    response_style: Literal["concise", "verbose"] = "concise"
    proactivity: Literal["proactive", "reactive"] = "proactive"
    help_level: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    preferred_language: str | None = None


class DecisionRecord(CamelModel):
    context: str
    decision: str
    field: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class UserMemoryData(VersionedModel):
    user_id: str
    style_preferences: StylePreferences = Field(default_factory=StylePreferences)
    business_context: BusinessContext = Field(default_factory=BusinessContext)
    interaction_patterns: InteractionPatterns = Field(default_factory=InteractionPatterns)
    decision_history: list[DecisionRecord] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Project tier
# ---------------------------------------------------------------------------

DesignDecisionType = Literal["color", "font", "layout", "section", "content"]
GoalPriority = Literal["high", "medium", "low"]
GoalStatus = Literal["pending", "achieved"]


class BusinessDetails(CamelModel):
    name: str = ""
    type: str = ""
    description: str = ""
    tagline: str | None = None
    target_audience: list[str] | None = None
    competitors: list[str] | None = None
    unique_selling_points: list[str] | None = None
    goals: list[str] | None = None


class DesignDecision(CamelModel):
    id: str = Field(default_factory=new_id)
    type: DesignDecisionType
    before: JsonValue = None
    after: JsonValue = None
    rationale: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class ContentVersion(CamelModel):
    id: str = Field(default_factory=new_id)
    section_id: str
    content: JsonValue = None
    timestamp: datetime = Field(default_factory=utc_now)


class SiteGoal(CamelModel):
    id: str = Field(default_factory=new_id)
    goal: str
    priority: GoalPriority = "medium"
    status: GoalStatus = "pending"


class ExistingWebsite(CamelModel):
    url: str
    title: str | None = None
    description: str | None = None
    colors: list[str] | None = None
    logo_url: str | None = None


class ContactInfo(CamelModel):
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class DiscoveredInfo(CamelModel):
    """What was found out about the business before onboarding began."""

    existing_website: ExistingWebsite | None = None
    social_links: dict[str, str] | None = None
    contact_info: ContactInfo | None = None
    domain: str | None = None


class ProjectMemoryData(VersionedModel):
    project_id: str
    business_details: BusinessDetails = Field(default_factory=BusinessDetails)
    design_decisions: list[DesignDecision] = Field(default_factory=list)
    content_history: list[ContentVersion] = Field(default_factory=list)
    generated_content_cache: dict[str, JsonValue] = Field(default_factory=dict)
    site_goals: list[SiteGoal] = Field(default_factory=list)
    discovered_info: DiscoveredInfo = Field(default_factory=DiscoveredInfo)


# ---------------------------------------------------------------------------
# Session tier
# ---------------------------------------------------------------------------


class SessionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


class SessionTaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class MessageRole(str, Enum):
    USER = "USER"
    ASSISTANT = "ASSISTANT"
    SYSTEM = "SYSTEM"


class SessionTask(CamelModel):
    id: str = Field(default_factory=new_id)
    task: str
    status: SessionTaskStatus = SessionTaskStatus.PENDING
    priority: int = 1
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None


class PendingQuestion(CamelModel):
    """A question the AI must ask before proceeding; unique per ``field``."""

    id: str = Field(default_factory=new_id)
    question: str
    field: str
    required: bool = True
    options: list[str] | None = None
    context: str | None = None


class WIPState(CamelModel):
    """Write-ahead snapshot of in-progress onboarding."""

    current_step: str | None = None
    pending_action: str | None = None
    partial_data: dict[str, JsonValue] | None = None


class ChatSessionRecord(VersionedModel):
    id: str = Field(default_factory=new_id)
    project_id: str
    user_id: str
    status: SessionStatus = SessionStatus.ACTIVE
    current_tasks: list[SessionTask] = Field(default_factory=list)
    pending_questions: list[PendingQuestion] = Field(default_factory=list)
    wip_state: WIPState = Field(default_factory=WIPState)
    created_at: datetime = Field(default_factory=utc_now)
    last_activity_at: datetime = Field(default_factory=utc_now)


class SessionMemoryData(CamelModel):
    """The memory-relevant projection of a ``ChatSessionRecord``."""

    current_tasks: list[SessionTask] = Field(default_factory=list)
    pending_questions: list[PendingQuestion] = Field(default_factory=list)
    wip_state: WIPState = Field(default_factory=WIPState)

    @classmethod
    def from_record(cls, record: ChatSessionRecord) -> "SessionMemoryData":
        return cls(
            current_tasks=record.current_tasks,
            pending_questions=record.pending_questions,
            wip_state=record.wip_state,
        )


class ChatMessageData(CamelModel):
    role: MessageRole
    content: str
    tool_calls: list[JsonValue] = Field(default_factory=list)
    actions: list[JsonValue] = Field(default_factory=list)
    tokens: int | None = None
    created_at: datetime = Field(default_factory=utc_now)


class SessionSummary(CamelModel):
    id: str
    status: SessionStatus
    last_activity_at: datetime
    message_count: int


# ---------------------------------------------------------------------------
# Combined context
# ---------------------------------------------------------------------------


@dataclass
class AIMemoryContext:
    """All three tiers as read for one prompt; any tier may be absent."""

    user: UserMemoryData | None = None
    project: ProjectMemoryData | None = None
    session: SessionMemoryData | None = None
