"""Onboarding pipeline: steps, input requirements and business-type tables.

Input field names are the camelCase keys the editor sends and the session
snapshot stores (``businessName``, ``primaryColor`` ...); they are data keys,
not attributes, so they stay in wire form throughout.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from pydantic import JsonValue


class PipelineStep(str, Enum):
    DISCOVERY = "discovery"
    BUSINESS_INFO = "business_info"
    BRANDING = "branding"
    STRUCTURE = "structure"
    CONTENT = "content"
    REFINEMENT = "refinement"


class FallbackStrategy(str, Enum):
    """What happens when an optional input is missing.

    ``ASK_USER`` and ``SKIP`` never fill a value; the other two do.
    """

    ASK_USER = "ask_user"
    GENERATE_DEFAULT = "generate_default"
    INFER_FROM_CONTEXT = "infer_from_context"
    SKIP = "skip"


FieldCheck = Callable[[JsonValue], bool]


@dataclass(frozen=True)
class InputRequirement:
    field: str
    label: str
    required: bool
    fallback_strategy: FallbackStrategy
    ai_can_generate: bool
    validator: FieldCheck | None = None
    depends_on: tuple[str, ...] = ()


@dataclass(frozen=True)
class StepConfig:
    id: PipelineStep
    name: str
    description: str
    order: int
    inputs: tuple[InputRequirement, ...] = ()


_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _non_empty_text(value: JsonValue) -> bool:
    return isinstance(value, str) and len(value) > 0


def _descriptive_text(value: JsonValue) -> bool:
    return isinstance(value, str) and len(value) > 10


def _hex_color(value: JsonValue) -> bool:
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def _req(
    field: str,
    label: str,
    fallback: FallbackStrategy,
    *,
    required: bool = False,
    ai_can_generate: bool = False,
    validator: FieldCheck | None = None,
    depends_on: tuple[str, ...] = (),
) -> InputRequirement:
    return InputRequirement(
        field=field,
        label=label,
        required=required,
        fallback_strategy=fallback,
        ai_can_generate=ai_can_generate,
        validator=validator,
        depends_on=depends_on,
    )


_F = FallbackStrategy

INPUT_REQUIREMENTS: dict[str, InputRequirement] = {
    req.field: req
    for req in (
        # Discovery
        _req("existingWebsite", "Existing website URL", _F.SKIP),
        _req("existingSocials", "Social media accounts", _F.SKIP),
        _req("existingDomain", "Domain name", _F.SKIP),
        _req("existingEmail", "Contact email", _F.SKIP),
        # Business info
        _req("businessType", "Business type", _F.ASK_USER,
             required=True, validator=_non_empty_text),
        _req("businessName", "Business name", _F.ASK_USER,
             required=True, validator=_non_empty_text),
        _req("businessDescription", "Business description", _F.ASK_USER,
             required=True, ai_can_generate=True, validator=_descriptive_text),
        _req("businessTagline", "Business tagline", _F.GENERATE_DEFAULT, ai_can_generate=True),
        # Branding
        _req("primaryColor", "Primary brand color", _F.GENERATE_DEFAULT,
             ai_can_generate=True, validator=_hex_color),
        _req("secondaryColor", "Secondary color", _F.INFER_FROM_CONTEXT,
             ai_can_generate=True, depends_on=("primaryColor",)),
        _req("accentColor", "Accent color", _F.INFER_FROM_CONTEXT,
             ai_can_generate=True, depends_on=("primaryColor",)),
        _req("headingFont", "Heading font", _F.GENERATE_DEFAULT, ai_can_generate=True),
        _req("bodyFont", "Body font", _F.GENERATE_DEFAULT, ai_can_generate=True),
        _req("logoUrl", "Logo", _F.SKIP),
        # Structure
        _req("targetAudience", "Target audience", _F.INFER_FROM_CONTEXT,
             ai_can_generate=True, depends_on=("businessType", "businessDescription")),
        _req("siteGoals", "Website goals", _F.GENERATE_DEFAULT,
             ai_can_generate=True, depends_on=("businessType",)),
        _req("selectedSections", "Site sections", _F.GENERATE_DEFAULT,
             ai_can_generate=True, depends_on=("businessType",)),
    )
}


def _inputs(*fields: str) -> tuple[InputRequirement, ...]:
    return tuple(INPUT_REQUIREMENTS[f] for f in fields)


PIPELINE_STEPS: tuple[StepConfig, ...] = (
    StepConfig(
        PipelineStep.DISCOVERY, "Discovery", "Gather existing business assets", 1,
        _inputs("existingWebsite", "existingSocials", "existingDomain", "existingEmail"),
    ),
    StepConfig(
        PipelineStep.BUSINESS_INFO, "Business Information", "Core business details", 2,
        _inputs("businessType", "businessName", "businessDescription", "businessTagline"),
    ),
    StepConfig(
        PipelineStep.BRANDING, "Branding", "Visual identity", 3,
        _inputs("primaryColor", "secondaryColor", "accentColor", "headingFont", "bodyFont", "logoUrl"),
    ),
    StepConfig(
        PipelineStep.STRUCTURE, "Site Structure", "Goals and sections", 4,
        _inputs("targetAudience", "siteGoals", "selectedSections"),
    ),
    StepConfig(PipelineStep.CONTENT, "Content Generation", "Generate site content", 5),
    StepConfig(PipelineStep.REFINEMENT, "Refinement", "User edits and adjustments", 6),
)

STEPS_BY_ID: dict[PipelineStep, StepConfig] = {s.id: s for s in PIPELINE_STEPS}


@dataclass(frozen=True)
class BusinessTypeDefaults:
    primary_color: str
    site_goals: tuple[str, ...]
    selected_sections: tuple[str, ...]


@dataclass(frozen=True)
class FontPairing:
    heading: str
    body: str


BUSINESS_TYPE_DEFAULTS: dict[str, BusinessTypeDefaults] = {
    "restaurant": BusinessTypeDefaults(
        "#dc2626",
        ("Showcase menu", "Enable reservations", "Show location & hours"),
        ("hero", "menu", "about", "gallery", "contact", "location"),
    ),
    "portfolio": BusinessTypeDefaults(
        "#0f172a",
        ("Showcase work", "Attract clients", "Share expertise"),
        ("hero", "portfolio", "about", "services", "testimonials", "contact"),
    ),
    "business": BusinessTypeDefaults(
        "#2563eb",
        ("Generate leads", "Build trust", "Explain services"),
        ("hero", "services", "about", "team", "testimonials", "contact", "cta"),
    ),
    "ecommerce": BusinessTypeDefaults(
        "#16a34a",
        ("Drive sales", "Showcase products", "Build trust"),
        ("hero", "featured-products", "categories", "about", "testimonials", "contact"),
    ),
    "blog": BusinessTypeDefaults(
        "#7c3aed",
        ("Share content", "Build audience", "Establish authority"),
        ("hero", "featured-posts", "categories", "about", "newsletter", "contact"),
    ),
    "fitness": BusinessTypeDefaults(
        "#ea580c",
        ("Attract members", "Show programs", "Enable booking"),
        ("hero", "programs", "trainers", "schedule", "pricing", "testimonials", "contact"),
    ),
}

FONT_RECOMMENDATIONS: dict[str, FontPairing] = {
    "restaurant": FontPairing("Playfair Display", "Lato"),
    "portfolio": FontPairing("Space Grotesk", "Inter"),
    "business": FontPairing("Inter", "Inter"),
    "ecommerce": FontPairing("Poppins", "Open Sans"),
    "blog": FontPairing("Merriweather", "Source Sans Pro"),
    "fitness": FontPairing("Montserrat", "Roboto"),
}

TARGET_AUDIENCES: dict[str, tuple[str, ...]] = {
    "restaurant": ("Food lovers", "Local diners", "Families"),
    "portfolio": ("Potential clients", "Recruiters", "Collaborators"),
    "business": ("Business owners", "Decision makers", "Companies"),
    "ecommerce": ("Online shoppers", "Value seekers", "Product enthusiasts"),
    "blog": ("Readers", "Enthusiasts", "Knowledge seekers"),
    "fitness": ("Health-conscious individuals", "Athletes", "Beginners"),
}

DEFAULT_PRIMARY_COLOR = "#2563eb"
DEFAULT_SECONDARY_COLOR = "#1e293b"
DEFAULT_ACCENT_COLOR = "#f59e0b"
DEFAULT_FONT = "Inter"
DEFAULT_SECTIONS: tuple[str, ...] = ("hero", "about", "contact")


@dataclass
class PipelineState:
    current_step: PipelineStep = PipelineStep.DISCOVERY
    completed_steps: list[PipelineStep] = field(default_factory=list)
    data: dict[str, JsonValue] = field(default_factory=dict)
    pending_inputs: list[str] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)


class PipelineEventType(str, Enum):
    STEP_STARTED = "STEP_STARTED"
    INPUT_REQUIRED = "INPUT_REQUIRED"
    INPUT_RECEIVED = "INPUT_RECEIVED"
    STEP_COMPLETED = "STEP_COMPLETED"
    GENERATION_STARTED = "GENERATION_STARTED"
    GENERATION_COMPLETED = "GENERATION_COMPLETED"
    ERROR = "ERROR"
    PIPELINE_COMPLETED = "PIPELINE_COMPLETED"


@dataclass(frozen=True)
class PipelineEvent:
    type: PipelineEventType
    step: PipelineStep | None = None
    field: str | None = None
    value: JsonValue = None
    question: str | None = None
    options: tuple[str, ...] | None = None
    message: str | None = None
