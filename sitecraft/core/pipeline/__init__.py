"""Website onboarding pipeline: step state machine and input validation."""
from __future__ import annotations

from sitecraft.core.pipeline.models import (
    BUSINESS_TYPE_DEFAULTS,
    FONT_RECOMMENDATIONS,
    INPUT_REQUIREMENTS,
    PIPELINE_STEPS,
    FallbackStrategy,
    InputRequirement,
    PipelineEvent,
    PipelineEventType,
    PipelineState,
    PipelineStep,
    StepConfig,
)
from sitecraft.core.pipeline.orchestrator import PipelineOrchestrator, StepOutcome
from sitecraft.core.pipeline.validator import (
    InputValidator,
    RequiredQuestion,
    ValidationResult,
    derive_accent_color,
    derive_secondary_color,
)

__all__ = [
    "BUSINESS_TYPE_DEFAULTS",
    "FONT_RECOMMENDATIONS",
    "INPUT_REQUIREMENTS",
    "PIPELINE_STEPS",
    "FallbackStrategy",
    "InputRequirement",
    "InputValidator",
    "PipelineEvent",
    "PipelineEventType",
    "PipelineOrchestrator",
    "PipelineState",
    "PipelineStep",
    "RequiredQuestion",
    "StepConfig",
    "StepOutcome",
    "ValidationResult",
    "derive_accent_color",
    "derive_secondary_color",
]
