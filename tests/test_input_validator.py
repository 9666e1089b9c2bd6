"""Tests for InputValidator and color derivation."""
from __future__ import annotations

import pytest

from sitecraft.core.pipeline import (
    InputValidator,
    PipelineStep,
    derive_accent_color,
    derive_secondary_color,
)
from sitecraft.core.pipeline.models import DEFAULT_ACCENT_COLOR, DEFAULT_SECONDARY_COLOR


class TestColorDerivation:
    def test_secondary_darkens_each_channel_by_fifty(self) -> None:
        assert derive_secondary_color("#2563eb") == "#0031b9"

    def test_accent_inverts_each_channel(self) -> None:
        assert derive_accent_color("#2563eb") == "#da9c14"

    def test_channels_clamp_at_zero(self) -> None:
        assert derive_secondary_color("#101010") == "#000000"

    @pytest.mark.parametrize("bad", ["", "blue", "#12345", "#gggggg"])
    def test_malformed_input_gives_defaults(self, bad: str) -> None:
        assert derive_secondary_color(bad) == DEFAULT_SECONDARY_COLOR
        assert derive_accent_color(bad) == DEFAULT_ACCENT_COLOR


class TestHasValue:
    @pytest.mark.parametrize("value", [None, "", "   ", [], {}])
    def test_empty_values(self, value) -> None:
        validator = InputValidator({"businessName": value})
        assert validator.has_value("businessName") is False

    def test_absent_field(self) -> None:
        assert InputValidator().has_value("businessName") is False

    def test_false_and_zero_count_as_values(self) -> None:
        validator = InputValidator({"a": 0, "b": False})
        assert validator.has_value("a") is True
        assert validator.has_value("b") is True


class TestValidateField:
    def test_required_missing(self) -> None:
        error = InputValidator().validate_field("businessType")

        assert error is not None
        assert error.code == "required"
        assert error.message == "Business type is required"

    def test_description_must_be_descriptive(self) -> None:
        error = InputValidator({"businessDescription": "Bakery"}).validate_field("businessDescription")

        assert error is not None
        assert error.code == "invalid"

    def test_primary_color_must_be_hex(self) -> None:
        assert InputValidator({"primaryColor": "blue"}).validate_field("primaryColor") is not None
        assert InputValidator({"primaryColor": "#DC2626"}).validate_field("primaryColor") is None

    def test_unknown_fields_are_accepted(self) -> None:
        assert InputValidator({"whatever": 1}).validate_field("whatever") is None


class TestValidateStep:
    def test_business_info_missing_required(self) -> None:
        result = InputValidator().validate_step(PipelineStep.BUSINESS_INFO)

        assert result.is_valid is False
        assert [r.field for r in result.missing_required] == [
            "businessType",
            "businessName",
            "businessDescription",
        ]
        assert [r.field for r in result.can_generate] == ["businessTagline"]
        assert result.suggestions == {}

    def test_business_info_complete(self) -> None:
        validator = InputValidator({
            "businessType": "restaurant",
            "businessName": "Luigi's",
            "businessDescription": "Family-run trattoria since 1982",
        })
        assert validator.validate_step(PipelineStep.BUSINESS_INFO).is_valid is True

    def test_branding_suggests_business_type_defaults(self) -> None:
        result = InputValidator({"businessType": "restaurant"}).validate_step(PipelineStep.BRANDING)

        assert result.is_valid is True
        assert result.suggestions == {
            "primaryColor": "#dc2626",
            "headingFont": "Playfair Display",
            "bodyFont": "Lato",
        }
        # Nothing to infer from until a primary color exists.
        assert result.can_infer == []

    def test_branding_infers_from_primary_color(self) -> None:
        result = InputValidator({"primaryColor": "#2563eb"}).validate_step(PipelineStep.BRANDING)

        assert result.suggestions["secondaryColor"] == "#0031b9"
        assert result.suggestions["accentColor"] == "#da9c14"
        assert "primaryColor" not in result.suggestions
        assert result.suggestions["headingFont"] == "Inter"

    def test_structure_uses_business_type(self) -> None:
        validator = InputValidator({
            "businessType": "fitness",
            "businessDescription": "Boutique gym with group classes",
        })
        result = validator.validate_step(PipelineStep.STRUCTURE)

        assert result.suggestions["targetAudience"] == [
            "Health-conscious individuals",
            "Athletes",
            "Beginners",
        ]
        assert result.suggestions["siteGoals"] == ["Attract members", "Show programs", "Enable booking"]
        assert "pricing" in result.suggestions["selectedSections"]

    def test_unknown_business_type_falls_back(self) -> None:
        result = InputValidator({"businessType": "spaceport"}).validate_step(PipelineStep.STRUCTURE)

        assert result.suggestions["selectedSections"] == ["hero", "about", "contact"]
        assert result.suggestions["siteGoals"] == []

    def test_steps_without_inputs_are_valid(self) -> None:
        assert InputValidator().validate_step(PipelineStep.CONTENT).is_valid is True

    def test_validate_all(self) -> None:
        result = InputValidator().validate_all()

        assert result.is_valid is False
        assert len(result.missing_required) == 3


class TestRequiredQuestions:
    def test_one_question_per_missing_required_input(self) -> None:
        questions = InputValidator({"businessName": "Acme"}).get_required_questions(
            PipelineStep.BUSINESS_INFO
        )

        assert [q.field for q in questions] == ["businessType", "businessDescription"]
        assert questions[0].options is not None
        assert "Restaurant & Food" in questions[0].options

    def test_no_questions_for_complete_step(self) -> None:
        assert InputValidator().get_required_questions(PipelineStep.DISCOVERY) == []
