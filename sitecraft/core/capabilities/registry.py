"""Capability registry and advisory matcher.

``CapabilityRegistry`` answers "what can the AI do for this user?" from the
static catalog.  ``match_capabilities`` scores free text against a set of
capabilities; it feeds suggestions and telemetry only.  The model picks
the actual tools through tool calling, so a low (or zero) match score must
never block a mutation.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable

from sitecraft.core.capabilities.catalog import CAPABILITIES, CAPABILITY_GROUPS
from sitecraft.core.capabilities.models import (
    DEFAULT_PRIORITY,
    Capability,
    CapabilityCategory,
    CapabilityGroup,
    CapabilityMatch,
    CapabilityStatus,
    UserContext,
)

logger = logging.getLogger(__name__)

_OFFERED_STATUSES = frozenset({CapabilityStatus.ACTIVE, CapabilityStatus.BETA})


def is_available(capability: Capability, user_context: UserContext) -> bool:
    """True when *user_context* satisfies every requirement of *capability*."""
    req = capability.requirements
    if req is None:
        return True
    if req.plan is not None and user_context.plan.rank < req.plan.rank:
        return False
    if req.assets and not all(a in user_context.available_assets for a in req.assets):
        return False
    if req.integrations and not all(
        i in user_context.connected_integrations for i in req.integrations
    ):
        return False
    if req.feature_flags and not all(
        f in user_context.enabled_feature_flags for f in req.feature_flags
    ):
        return False
    return True


def match_capabilities(
    user_input: str,
    capabilities: Iterable[Capability],
) -> list[CapabilityMatch]:
    """Score *user_input* against *capabilities*, best match first.

    Each trigger found as a substring of the lower-cased input contributes
    ``len(trigger) / 10`` (longer phrases are more specific).  Matching
    capabilities then get ``priority / 10`` on top, and the total is divided
    by 3 and clamped to 1.0.  Capabilities with no matched trigger are
    dropped.  Ties keep catalog order.
    """
    text = user_input.lower()
    matches: list[CapabilityMatch] = []

    for capability in capabilities:
        matched: list[str] = []
        score = 0.0
        for trigger in capability.triggers:
            if trigger.lower() in text:
                matched.append(trigger)
                score += len(trigger) / 10

        if not matched:
            continue

        priority = capability.priority if capability.priority is not None else DEFAULT_PRIORITY
        score += priority / 10
        confidence = min(max(score / 3, 0.0), 1.0)
        matches.append(
            CapabilityMatch(
                capability=capability,
                confidence=confidence,
                matched_triggers=tuple(matched),
            )
        )

    matches.sort(key=lambda m: m.confidence, reverse=True)
    return matches


class CapabilityRegistry:
    """Read-only view over a capability catalog."""

    def __init__(
        self,
        capabilities: Iterable[Capability] = CAPABILITIES,
        groups: Iterable[CapabilityGroup] = CAPABILITY_GROUPS,
    ) -> None:
        self._capabilities: tuple[Capability, ...] = tuple(capabilities)
        self._groups: tuple[CapabilityGroup, ...] = tuple(groups)
        self._by_id: dict[str, Capability] = {c.id: c for c in self._capabilities}
        if len(self._by_id) != len(self._capabilities):
            raise ValueError("Capability ids must be unique")

    @property
    def capabilities(self) -> tuple[Capability, ...]:
        return self._capabilities

    @property
    def groups(self) -> tuple[CapabilityGroup, ...]:
        return self._groups

    def get(self, capability_id: str) -> Capability | None:
        return self._by_id.get(capability_id)

    def by_category(self, category: CapabilityCategory) -> list[Capability]:
        return [c for c in self._capabilities if c.category == category]

    def by_status(self, status: CapabilityStatus) -> list[Capability]:
        return [c for c in self._capabilities if c.status == status]

    def active(self) -> list[Capability]:
        """Capabilities that are offered at all (active or beta)."""
        return [c for c in self._capabilities if c.status in _OFFERED_STATUSES]

    def available(self, user_context: UserContext) -> list[Capability]:
        """Active/beta capabilities whose requirements *user_context* satisfies."""
        return [c for c in self.active() if is_available(c, user_context)]

    def prompt_capabilities(self, user_context: UserContext) -> list[Capability]:
        """Capabilities to describe in the system prompt.

        Available ones plus every coming-soon entry, so the model can tell the
        user a requested feature is on the way instead of improvising.
        """
        available = self.available(user_context)
        return available + self.by_status(CapabilityStatus.COMING_SOON)

    def match(
        self,
        user_input: str,
        capabilities: Iterable[Capability] | None = None,
    ) -> list[CapabilityMatch]:
        pool = self.active() if capabilities is None else capabilities
        matches = match_capabilities(user_input, pool)
        if matches:
            logger.debug(
                f"Capability match for {user_input[:60]!r}: "
                f"{matches[0].capability.id} ({matches[0].confidence:.2f})"
            )
        return matches

    def tool_name_for(self, capability_id: str) -> str | None:
        capability = self.get(capability_id)
        return capability.tool_name if capability else None

    def requires_ui(self, capability_id: str) -> bool:
        capability = self.get(capability_id)
        return capability is not None and capability.ui_component is not None


@lru_cache()
def get_capability_registry() -> CapabilityRegistry:
    """Registry over the built-in catalog (immutable, safe to share)."""
    return CapabilityRegistry()
