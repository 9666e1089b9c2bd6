"""AI capability catalog, matcher and system-prompt builder.

The registry is the answer to "what can the AI do right now for this user";
the prompt builder turns that answer (plus site state and memory) into the
system prompt the model sees.
"""
from __future__ import annotations

from sitecraft.core.capabilities.catalog import CAPABILITIES, CAPABILITY_GROUPS
from sitecraft.core.capabilities.models import (
    Capability,
    CapabilityCategory,
    CapabilityGroup,
    CapabilityMatch,
    CapabilityRequirements,
    CapabilityStatus,
    PlanTier,
    UserContext,
)
from sitecraft.core.capabilities.prompt_builder import BusinessInfo, build_system_prompt
from sitecraft.core.capabilities.registry import (
    CapabilityRegistry,
    get_capability_registry,
    is_available,
    match_capabilities,
)

__all__ = [
    "CAPABILITIES",
    "CAPABILITY_GROUPS",
    "BusinessInfo",
    "Capability",
    "CapabilityCategory",
    "CapabilityGroup",
    "CapabilityMatch",
    "CapabilityRegistry",
    "CapabilityRequirements",
    "CapabilityStatus",
    "PlanTier",
    "UserContext",
    "build_system_prompt",
    "get_capability_registry",
    "is_available",
    "match_capabilities",
]
