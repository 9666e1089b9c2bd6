"""Capability catalog models and enums.

``Capability`` is the single immutable record per user-invokable action.
Records are built once in ``catalog.py`` and queried through
``CapabilityRegistry``; nothing mutates them after load.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CapabilityCategory(str, Enum):
    """Functional area a capability belongs to."""

    CONTENT = "content"            # add/edit text, sections
    DESIGN = "design"              # colors, fonts, layouts
    MEDIA = "media"                # images, videos, logos
    STRUCTURE = "structure"        # pages, navigation
    SEO = "seo"                    # meta, sitemap, analytics
    INTEGRATIONS = "integrations"  # forms, payments, email
    PUBLISHING = "publishing"      # domain, hosting, SSL
    AI_GENERATE = "ai_generate"    # AI content/image generation


class CapabilityStatus(str, Enum):
    """Lifecycle status of a capability.

    ``ACTIVE`` and ``BETA`` are offered to the model as tools.
    ``COMING_SOON`` is mentioned in the prompt so the model can acknowledge
    the request and defer it.  ``DEPRECATED`` is never surfaced.
    """

    ACTIVE = "active"
    BETA = "beta"
    COMING_SOON = "coming_soon"
    DEPRECATED = "deprecated"


class PlanTier(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"

    @property
    def rank(self) -> int:
        """Ordinal used for ``>=`` plan comparisons (free < pro < enterprise)."""
        return _PLAN_RANK[self]


_PLAN_RANK: dict[PlanTier, int] = {
    PlanTier.FREE: 0,
    PlanTier.PRO: 1,
    PlanTier.ENTERPRISE: 2,
}

DEFAULT_PRIORITY = 5


@dataclass(frozen=True)
class CapabilityRequirements:
    """Gating requirements; every non-empty one must be satisfied."""

    plan: PlanTier | None = None
    assets: tuple[str, ...] = ()
    integrations: tuple[str, ...] = ()
    feature_flags: tuple[str, ...] = ()


@dataclass(frozen=True)
class Capability:
    """Immutable catalog entry for one user-invokable action.

    Attributes:
        id: Stable identifier (usually equal to ``tool_name``).
        triggers: Lower-case phrases matched as substrings of user input.
        tool_name: Name of the tool the model calls, if the capability is
            executed through tool calling.
        ui_component: Client component that handles the capability when it
            needs UI instead of a tool call.
        priority: Specificity bonus for matching; ``None`` scores as 5.
    """

    id: str
    name: str
    description: str
    category: CapabilityCategory
    status: CapabilityStatus
    triggers: tuple[str, ...]
    requirements: CapabilityRequirements | None = None
    tool_name: str | None = None
    ui_component: str | None = None
    examples: tuple[str, ...] = ()
    related_capabilities: tuple[str, ...] = ()
    priority: int | None = None


@dataclass(frozen=True)
class CapabilityGroup:
    """UI/prompt grouping of one or more categories."""

    id: str
    name: str
    description: str
    categories: tuple[CapabilityCategory, ...]
    icon: str | None = None


@dataclass(frozen=True)
class UserContext:
    """What the current user is entitled to; drives capability filtering."""

    plan: PlanTier = PlanTier.FREE
    connected_integrations: frozenset[str] = field(default_factory=frozenset)
    available_assets: frozenset[str] = field(default_factory=frozenset)
    enabled_feature_flags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class CapabilityMatch:
    """Advisory result of scoring user text against one capability."""

    capability: Capability
    confidence: float
    matched_triggers: tuple[str, ...]
