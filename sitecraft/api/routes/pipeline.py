"""
Onboarding pipeline endpoint.

One POST with an ``action`` discriminator:

- ``get_defaults``: colors, fonts, goals and sections for a business type
- ``validate_step``: enter a step with the supplied data and report what is
  missing, what was suggested and which questions to ask
- ``save_discovery``: record what was discovered about the business in the
  project's memory

Unknown actions are a 400.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import JsonValue
from pydantic import ValidationError as PydanticValidationError

from sitecraft.api.dependencies import get_repositories, require_user_id
from sitecraft.contracts.json_types import jstr
from sitecraft.core.errors import MemoryConflictError, MemoryNotFoundError
from sitecraft.core.memory.models import DiscoveredInfo
from sitecraft.core.memory.project import ProjectMemoryStore
from sitecraft.core.memory.session import SessionMemoryStore
from sitecraft.core.pipeline.models import (
    BUSINESS_TYPE_DEFAULTS,
    DEFAULT_FONT,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECTIONS,
    FONT_RECOMMENDATIONS,
    PipelineStep,
)
from sitecraft.core.pipeline.orchestrator import PipelineOrchestrator
from sitecraft.core.pipeline.validator import derive_secondary_color
from sitecraft.models.requests import PipelineRequest
from sitecraft.models.responses import (
    DefaultsResponse,
    QuestionResponse,
    SaveDiscoveryResponse,
    StepValidationResponse,
)
from sitecraft.services.repositories import Repositories

router = APIRouter()
logger = logging.getLogger(__name__)

# Project id used while onboarding runs before a project exists.
ONBOARDING_PROJECT_ID = "temp-onboarding"

_CONTROL_KEYS = ("projectId", "step")


def get_defaults(data: dict[str, JsonValue]) -> DefaultsResponse:
    business_type = jstr(data.get("businessType"))
    defaults = BUSINESS_TYPE_DEFAULTS.get(business_type)
    fonts = FONT_RECOMMENDATIONS.get(business_type)
    primary = defaults.primary_color if defaults else DEFAULT_PRIMARY_COLOR
    return DefaultsResponse(
        primary_color=primary,
        secondary_color=derive_secondary_color(primary),
        heading_font=fonts.heading if fonts else DEFAULT_FONT,
        body_font=fonts.body if fonts else DEFAULT_FONT,
        site_goals=list(defaults.site_goals) if defaults else [],
        selected_sections=list(defaults.selected_sections if defaults else DEFAULT_SECTIONS),
    )


def _orchestrator(
    project_id: str,
    user_id: str,
    repositories: Repositories,
    data: dict[str, JsonValue] | None = None,
) -> PipelineOrchestrator:
    return PipelineOrchestrator(
        project_id=project_id,
        user_id=user_id,
        session_memory=SessionMemoryStore(project_id, user_id, repositories.sessions),
        project_memory=ProjectMemoryStore(project_id, repositories.project_memory),
        initial_data=data,
    )


async def validate_step(
    data: dict[str, JsonValue],
    user_id: str,
    repositories: Repositories,
) -> StepValidationResponse:
    raw_step = jstr(data.get("step"), PipelineStep.DISCOVERY.value)
    try:
        step = PipelineStep(raw_step)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown step: {raw_step}")

    project_id = jstr(data.get("projectId")) or ONBOARDING_PROJECT_ID
    inputs = {k: v for k, v in data.items() if k not in _CONTROL_KEYS}
    orchestrator = _orchestrator(project_id, user_id, repositories, inputs)

    validation = await orchestrator.start_step(step)
    questions = orchestrator.get_required_questions()
    return StepValidationResponse(
        is_valid=validation.is_valid,
        missing_fields=[r.field for r in validation.missing_required],
        suggestions=validation.suggestions,
        questions=[
            QuestionResponse(
                field=q.field,
                question=q.question,
                options=list(q.options) if q.options else None,
                context=q.context,
            )
            for q in questions
        ],
    )


async def save_discovery(
    data: dict[str, JsonValue],
    user_id: str,
    repositories: Repositories,
) -> SaveDiscoveryResponse:
    project_id = jstr(data.get("projectId"))
    if not project_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="projectId is required")
    if await repositories.sites.get(project_id, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    try:
        info = DiscoveredInfo.model_validate({k: v for k, v in data.items() if k not in _CONTROL_KEYS})
    except PydanticValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.errors(include_url=False))

    await _orchestrator(project_id, user_id, repositories).set_discovered_info(info)
    return SaveDiscoveryResponse(success=True, message="Discovery data saved")


@router.post(
    "/pipeline",
    response_model=DefaultsResponse | StepValidationResponse | SaveDiscoveryResponse,
    response_model_by_alias=True,
    responses={
        400: {"description": "Unknown action or malformed data"},
        401: {"description": "Missing X-User-Id"},
        404: {"description": "Project or session not found"},
        409: {"description": "Concurrent memory update"},
    },
)
async def run_pipeline_action(
    body: PipelineRequest,
    user_id: str = Depends(require_user_id),
    repositories: Repositories = Depends(get_repositories),
) -> DefaultsResponse | StepValidationResponse | SaveDiscoveryResponse:
    try:
        if body.action == "get_defaults":
            return get_defaults(body.data)
        if body.action == "validate_step":
            return await validate_step(body.data, user_id, repositories)
        if body.action == "save_discovery":
            return await save_discovery(body.data, user_id, repositories)
    except MemoryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except MemoryConflictError as e:
        logger.warning(f"Memory conflict in pipeline action {body.action}: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The session was being updated concurrently. Please retry.",
        )

    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown action")
