"""PipelineOrchestrator: walks a user through website onboarding step by step.

State machine over ``PIPELINE_STEPS``.  Transitions go forward through
``complete_step`` or jump through ``go_to_step``; ``completed_steps`` only
grows.  Every input is written through to the session's WIP snapshot so an
interrupted onboarding resumes with ``load_from_session``.

Validation failures are returned as data.  Memory failures propagate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping

from pydantic import JsonValue

from sitecraft.core.memory.models import DiscoveredInfo
from sitecraft.core.memory.project import ProjectMemoryStore
from sitecraft.core.memory.session import SessionMemoryStore
from sitecraft.core.pipeline.models import (
    BUSINESS_TYPE_DEFAULTS,
    FONT_RECOMMENDATIONS,
    PIPELINE_STEPS,
    STEPS_BY_ID,
    PipelineEvent,
    PipelineEventType,
    PipelineState,
    PipelineStep,
    StepConfig,
)
from sitecraft.core.pipeline.validator import (
    InputValidator,
    RequiredQuestion,
    ValidationResult,
    derive_secondary_color,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[PipelineEvent], None]


@dataclass
class StepOutcome:
    success: bool
    next_step: PipelineStep | None = None
    errors: list[str] = field(default_factory=list)
    pipeline_completed: bool = False


class PipelineOrchestrator:
    def __init__(
        self,
        project_id: str,
        user_id: str,
        session_memory: SessionMemoryStore,
        project_memory: ProjectMemoryStore,
        initial_data: Mapping[str, JsonValue] | None = None,
        on_event: EventHandler | None = None,
    ) -> None:
        self.project_id = project_id
        self.user_id = user_id
        self._session_memory = session_memory
        self._project_memory = project_memory
        self._on_event = on_event
        self._state = PipelineState(data=dict(initial_data or {}))
        self._validator = InputValidator(self._state.data)

    # --- State ---

    def get_state(self) -> PipelineState:
        """A snapshot; mutating it does not affect the orchestrator."""
        return replace(
            self._state,
            completed_steps=list(self._state.completed_steps),
            data=dict(self._state.data),
            pending_inputs=list(self._state.pending_inputs),
            errors=[dict(e) for e in self._state.errors],
        )

    def get_data(self) -> dict[str, JsonValue]:
        return dict(self._state.data)

    def current_step_config(self) -> StepConfig:
        return STEPS_BY_ID.get(self._state.current_step, PIPELINE_STEPS[0])

    # --- Inputs ---

    def _store(self, field_name: str, value: JsonValue) -> None:
        self._state.data[field_name] = value
        self._validator.update_data({field_name: value})

    async def _snapshot(self) -> None:
        await self._session_memory.set_wip_state(
            current_step=self._state.current_step.value,
            partial_data=dict(self._state.data),
        )

    async def set_input(self, field_name: str, value: JsonValue) -> None:
        self._store(field_name, value)
        self._emit(PipelineEvent(PipelineEventType.INPUT_RECEIVED, field=field_name, value=value))

        self._state.pending_inputs = [f for f in self._state.pending_inputs if f != field_name]
        self._state.errors = [e for e in self._state.errors if e["field"] != field_name]
        error = self._validator.validate_field(field_name)
        if error is not None:
            self._state.errors.append({"field": error.field, "message": error.message})
            self._emit(PipelineEvent(PipelineEventType.ERROR, field=field_name, message=error.message))

        await self._snapshot()
        await self._session_memory.resolve_question_by_field(field_name)

    async def set_bulk_inputs(self, data: Mapping[str, JsonValue]) -> None:
        for field_name, value in data.items():
            await self.set_input(field_name, value)

    # --- Steps ---

    async def start_step(self, step: PipelineStep) -> ValidationResult:
        """Enter *step*, ask for what is missing and fill what can be filled.

        Generated defaults are applied first; the step is then re-checked so
        inferred fields whose dependencies were just filled are derived in the
        same call.  A value is only ever applied to a field that is still
        unset.
        """
        self._state.current_step = step
        self._emit(PipelineEvent(PipelineEventType.STEP_STARTED, step=step))

        validation = self._validator.validate_step(step)

        for question in self._validator.get_required_questions(step):
            await self._session_memory.add_pending_question(
                field=question.field,
                question=question.question,
                required=True,
                options=list(question.options) if question.options else None,
                context=question.context,
            )
            if question.field not in self._state.pending_inputs:
                self._state.pending_inputs.append(question.field)
            self._emit(PipelineEvent(
                PipelineEventType.INPUT_REQUIRED,
                field=question.field,
                question=question.question,
                options=question.options,
            ))

        self._apply_suggestions(validation.suggestions)

        followup = self._validator.validate_step(step)
        new_suggestions = {k: v for k, v in followup.suggestions.items() if k not in validation.suggestions}
        if new_suggestions:
            self._apply_suggestions(new_suggestions)
            inferred = [r for r in followup.can_infer if r.field in new_suggestions]
            validation.can_infer.extend(inferred)
            validation.suggestions.update(new_suggestions)

        await self._snapshot()
        return validation

    def _apply_suggestions(self, suggestions: Mapping[str, JsonValue]) -> None:
        for field_name, value in suggestions.items():
            if self._validator.has_value(field_name):
                continue
            self._store(field_name, value)
            self._emit(PipelineEvent(PipelineEventType.GENERATION_COMPLETED, field=field_name, value=value))

    async def complete_step(self) -> StepOutcome:
        step = self._state.current_step
        validation = self._validator.validate_step(step)
        if not validation.is_valid:
            return StepOutcome(
                success=False,
                errors=[f"Missing: {r.label}" for r in validation.missing_required],
            )

        if step not in self._state.completed_steps:
            self._state.completed_steps.append(step)
        self._emit(PipelineEvent(PipelineEventType.STEP_COMPLETED, step=step))

        await self._save_to_project_memory()

        next_config = self.get_step_by_order(STEPS_BY_ID[step].order + 1)
        if next_config is not None:
            return StepOutcome(success=True, next_step=next_config.id)

        logger.info(f"Onboarding pipeline completed for project {self.project_id}")
        self._emit(PipelineEvent(PipelineEventType.PIPELINE_COMPLETED))
        return StepOutcome(success=True, pipeline_completed=True)

    async def go_to_step(self, step: PipelineStep) -> ValidationResult:
        return await self.start_step(step)

    # --- Defaults ---

    def generate_defaults(self) -> None:
        """Fill unset fields from the business type's defaults and fonts, then derive the secondary color."""
        business_type = self._state.data.get("businessType")
        if not isinstance(business_type, str) or not business_type:
            return

        defaults = BUSINESS_TYPE_DEFAULTS.get(business_type)
        if defaults is not None:
            values: dict[str, JsonValue] = {
                "primaryColor": defaults.primary_color,
                "siteGoals": list(defaults.site_goals),
                "selectedSections": list(defaults.selected_sections),
            }
            for field_name, value in values.items():
                if self._validator.has_value(field_name):
                    continue
                self._emit(PipelineEvent(PipelineEventType.GENERATION_STARTED, field=field_name))
                self._store(field_name, value)
                self._emit(PipelineEvent(PipelineEventType.GENERATION_COMPLETED, field=field_name, value=value))

        fonts = FONT_RECOMMENDATIONS.get(business_type)
        if fonts is not None:
            if not self._validator.has_value("headingFont"):
                self._store("headingFont", fonts.heading)
            if not self._validator.has_value("bodyFont"):
                self._store("bodyFont", fonts.body)

        primary = self._state.data.get("primaryColor")
        if isinstance(primary, str) and primary and not self._validator.has_value("secondaryColor"):
            self._store("secondaryColor", derive_secondary_color(primary))

    # --- Discovery ---

    async def set_discovered_info(self, info: DiscoveredInfo) -> None:
        """Record discovery results and seed onboarding inputs from them."""
        await self._project_memory.set_discovered_info(info)

        site = info.existing_website
        if site is not None:
            if site.title and not self._validator.has_value("businessName"):
                await self.set_input("businessName", site.title)
            if site.description and not self._validator.has_value("businessDescription"):
                await self.set_input("businessDescription", site.description)
            if site.colors and not self._validator.has_value("primaryColor"):
                await self.set_input("primaryColor", site.colors[0])
            if site.logo_url:
                await self.set_input("logoUrl", site.logo_url)

        if info.contact_info is not None and info.contact_info.email:
            await self.set_input("existingEmail", info.contact_info.email)
        if info.social_links:
            await self.set_input("existingSocials", dict(info.social_links))
        if info.domain:
            await self.set_input("existingDomain", info.domain)

    # --- Memory ---

    async def _save_to_project_memory(self) -> None:
        data = self._state.data

        def text(key: str) -> str | None:
            value = data.get(key)
            return value if isinstance(value, str) else None

        audience = data.get("targetAudience")
        await self._project_memory.update_business_details(
            name=text("businessName"),
            type=text("businessType"),
            description=text("businessDescription"),
            tagline=text("businessTagline"),
            target_audience=[a for a in audience if isinstance(a, str)] if isinstance(audience, list) else None,
        )

    async def load_from_session(self) -> None:
        wip = await self._session_memory.get_wip_state()
        if wip.current_step:
            try:
                self._state.current_step = PipelineStep(wip.current_step)
            except ValueError:
                logger.warning(f"Ignoring unknown step in session snapshot: {wip.current_step!r}")
        if wip.partial_data:
            self._state.data.update(wip.partial_data)
            self._validator.update_data(wip.partial_data)

    # --- Queries ---

    def get_required_questions(self) -> list[RequiredQuestion]:
        return self._validator.get_required_questions(self._state.current_step)

    def is_step_valid(self, step: PipelineStep | None = None) -> bool:
        return self._validator.validate_step(step or self._state.current_step).is_valid

    def get_missing_fields(self) -> list[str]:
        result = self._validator.validate_step(self._state.current_step)
        return [r.field for r in result.missing_required]

    def _emit(self, event: PipelineEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)

    @staticmethod
    def get_step_by_order(order: int) -> StepConfig | None:
        return next((s for s in PIPELINE_STEPS if s.order == order), None)

    @staticmethod
    def get_all_steps() -> list[StepConfig]:
        return list(PIPELINE_STEPS)
