"""InputValidator: checks collected onboarding data against step requirements.

Validation never raises.  Missing inputs come back as data in a
``ValidationResult``; each missing optional input's fallback strategy
decides whether a value is proposed (``suggestions``) for it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from pydantic import JsonValue

from sitecraft.core.errors import ValidationError
from sitecraft.core.pipeline.models import (
    BUSINESS_TYPE_DEFAULTS,
    DEFAULT_ACCENT_COLOR,
    DEFAULT_FONT,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
    DEFAULT_SECTIONS,
    FONT_RECOMMENDATIONS,
    INPUT_REQUIREMENTS,
    PIPELINE_STEPS,
    STEPS_BY_ID,
    TARGET_AUDIENCES,
    FallbackStrategy,
    InputRequirement,
    PipelineStep,
)


@dataclass
class ValidationResult:
    is_valid: bool
    missing_required: list[InputRequirement] = field(default_factory=list)
    can_generate: list[InputRequirement] = field(default_factory=list)
    can_infer: list[InputRequirement] = field(default_factory=list)
    suggestions: dict[str, JsonValue] = field(default_factory=dict)


@dataclass(frozen=True)
class RequiredQuestion:
    field: str
    question: str
    options: tuple[str, ...] | None = None
    context: str | None = None


_QUESTIONS: dict[str, RequiredQuestion] = {
    "businessType": RequiredQuestion(
        field="businessType",
        question="What type of business is this website for?",
        options=(
            "Restaurant & Food",
            "Portfolio & Creative",
            "Business & Services",
            "E-commerce & Shop",
            "Blog & Content",
            "Fitness & Health",
        ),
        context="This helps us choose the right template and features",
    ),
    "businessName": RequiredQuestion(
        field="businessName",
        question="What's the name of your business?",
        context="This will be used throughout your website",
    ),
    "businessDescription": RequiredQuestion(
        field="businessDescription",
        question="Tell me about your business in a few sentences.",
        context="Describe what you do, who you serve, and what makes you unique",
    ),
}


# ---------------------------------------------------------------------------
# Color derivation
# ---------------------------------------------------------------------------
# Plain per-channel RGB arithmetic, not a perceptual color model.


def _channels(hex_color: str) -> tuple[int, int, int] | None:
    digits = hex_color.lstrip("#")
    if len(digits) != 6:
        return None
    try:
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError:
        return None


def _to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def derive_secondary_color(primary: str) -> str:
    """Darken each channel by 50; malformed input gives the default secondary."""
    rgb = _channels(primary)
    if rgb is None:
        return DEFAULT_SECONDARY_COLOR
    return _to_hex(*(max(0, c - 50) for c in rgb))


def derive_accent_color(primary: str) -> str:
    """Invert each channel; malformed input gives the default accent."""
    rgb = _channels(primary)
    if rgb is None:
        return DEFAULT_ACCENT_COLOR
    return _to_hex(*(255 - c for c in rgb))


class InputValidator:
    def __init__(self, data: Mapping[str, JsonValue] | None = None) -> None:
        self._data: dict[str, JsonValue] = dict(data or {})

    @property
    def data(self) -> dict[str, JsonValue]:
        return dict(self._data)

    def update_data(self, data: Mapping[str, JsonValue]) -> None:
        self._data.update(data)

    def get_value(self, field_name: str) -> JsonValue:
        return self._data.get(field_name)

    def has_value(self, field_name: str) -> bool:
        """False for absent, ``None``, blank strings and empty lists or objects."""
        value = self._data.get(field_name)
        if value is None:
            return False
        if isinstance(value, str) and not value.strip():
            return False
        if isinstance(value, (list, dict)) and not value:
            return False
        return True

    def validate_field(self, field_name: str) -> ValidationError | None:
        """``None`` when *field_name* is acceptable; unknown fields always are."""
        requirement = INPUT_REQUIREMENTS.get(field_name)
        if requirement is None:
            return None

        if requirement.required and not self.has_value(field_name):
            return ValidationError(
                field=field_name,
                message=f"{requirement.label} is required",
                code="required",
            )

        value = self.get_value(field_name)
        if value and requirement.validator is not None and not requirement.validator(value):
            return ValidationError(
                field=field_name,
                message=f"Invalid {requirement.label}",
                code="invalid",
            )
        return None

    def validate_step(self, step: PipelineStep) -> ValidationResult:
        config = STEPS_BY_ID.get(step)
        if config is None:
            return ValidationResult(is_valid=True)

        result = ValidationResult(is_valid=True)
        for requirement in config.inputs:
            if self.has_value(requirement.field):
                continue
            if requirement.required:
                result.missing_required.append(requirement)
                continue

            strategy = requirement.fallback_strategy
            if strategy == FallbackStrategy.GENERATE_DEFAULT and requirement.ai_can_generate:
                result.can_generate.append(requirement)
                suggestion = self.suggest_default(requirement.field)
                if suggestion is not None:
                    result.suggestions[requirement.field] = suggestion
            elif strategy == FallbackStrategy.INFER_FROM_CONTEXT and self._can_infer(requirement):
                result.can_infer.append(requirement)
                inferred = self.infer_value(requirement.field)
                if inferred is not None:
                    result.suggestions[requirement.field] = inferred

        result.is_valid = not result.missing_required
        return result

    def validate_all(self) -> ValidationResult:
        combined = ValidationResult(is_valid=True)
        for step in PIPELINE_STEPS:
            result = self.validate_step(step.id)
            combined.missing_required.extend(result.missing_required)
            combined.can_generate.extend(result.can_generate)
            combined.can_infer.extend(result.can_infer)
            combined.suggestions.update(result.suggestions)
        combined.is_valid = not combined.missing_required
        return combined

    def _can_infer(self, requirement: InputRequirement) -> bool:
        if not requirement.depends_on:
            return False
        return all(self.has_value(dep) for dep in requirement.depends_on)

    def _business_type(self) -> str | None:
        value = self._data.get("businessType")
        return value if isinstance(value, str) else None

    def suggest_default(self, field_name: str) -> JsonValue:
        """Business-type-keyed default for a ``generate_default`` field, else ``None``."""
        business_type = self._business_type()
        defaults = BUSINESS_TYPE_DEFAULTS.get(business_type) if business_type else None
        fonts = FONT_RECOMMENDATIONS.get(business_type) if business_type else None

        if field_name == "primaryColor":
            return defaults.primary_color if defaults else DEFAULT_PRIMARY_COLOR
        if field_name == "headingFont":
            return fonts.heading if fonts else DEFAULT_FONT
        if field_name == "bodyFont":
            return fonts.body if fonts else DEFAULT_FONT
        if field_name == "siteGoals":
            return list(defaults.site_goals) if defaults else []
        if field_name == "selectedSections":
            return list(defaults.selected_sections) if defaults else list(DEFAULT_SECTIONS)
        return None

    def infer_value(self, field_name: str) -> JsonValue:
        """Value derived from other collected data, else ``None``."""
        primary = self._data.get("primaryColor")
        primary = primary if isinstance(primary, str) and primary else None

        if field_name == "secondaryColor":
            return derive_secondary_color(primary) if primary else DEFAULT_SECONDARY_COLOR
        if field_name == "accentColor":
            return derive_accent_color(primary) if primary else DEFAULT_ACCENT_COLOR
        if field_name == "targetAudience":
            business_type = self._business_type()
            return list(TARGET_AUDIENCES.get(business_type, ())) if business_type else []
        return None

    def get_required_questions(self, step: PipelineStep) -> list[RequiredQuestion]:
        """One question per missing required input of *step*."""
        result = self.validate_step(step)
        return [self._build_question(r) for r in result.missing_required]

    @staticmethod
    def _build_question(requirement: InputRequirement) -> RequiredQuestion:
        known = _QUESTIONS.get(requirement.field)
        if known is not None:
            return known
        return RequiredQuestion(
            field=requirement.field,
            question=f"What is your {requirement.label.lower()}?",
        )
