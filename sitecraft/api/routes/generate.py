"""
Generation endpoints: onboarding field suggestions and first-draft sites.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from sitecraft.api.dependencies import get_router, get_site_generator, require_user_id
from sitecraft.config import settings
from sitecraft.core.capabilities.prompt_builder import BusinessInfo
from sitecraft.core.providers.base import ProviderExhaustedError
from sitecraft.core.providers.router import ProviderRouter
from sitecraft.models.requests import GenerateRequest, SuggestRequest
from sitecraft.models.responses import GenerateResponse, SuggestResponse
from sitecraft.services.command import ProjectNotFoundError
from sitecraft.services.generation import ContentGenerationError, GenerateInput, SiteGenerator
from sitecraft.services.suggestions import suggest_field_values

router = APIRouter()
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

AI_UNAVAILABLE = "AI service unavailable"


@router.post(
    "/ai/suggest",
    response_model=SuggestResponse,
    responses={
        401: {"description": "Missing X-User-Id"},
        503: {"description": "No AI provider answered"},
    },
)
@limiter.limit("30/minute")
async def suggest(
    request: Request,
    body: SuggestRequest,
    user_id: str = Depends(require_user_id),
    ai_router: ProviderRouter = Depends(get_router),
) -> SuggestResponse:
    """Up to three suggested values for an onboarding field."""
    business = BusinessInfo(
        name=body.business_context.name,
        type=body.business_context.type,
        description=body.business_context.description,
    )
    try:
        suggestions = await suggest_field_values(
            ai_router,
            body.field,
            business,
            current_value=body.current_value,
            timeout=settings.llm_timeout,
        )
    except ProviderExhaustedError as e:
        logger.error(f"Suggestions for {body.field} failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=AI_UNAVAILABLE)
    return SuggestResponse(suggestions=suggestions)


@router.post(
    "/generate",
    response_model=GenerateResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={
        401: {"description": "Missing X-User-Id"},
        404: {"description": "Project not found"},
        502: {"description": "The AI reply was not usable site content"},
        503: {"description": "No AI provider answered"},
    },
)
@limiter.limit("10/minute")
async def generate_site(
    request: Request,
    body: GenerateRequest,
    user_id: str = Depends(require_user_id),
    generator: SiteGenerator = Depends(get_site_generator),
) -> GenerateResponse:
    """Generate the project's site from its business basics, replacing any previous draft."""
    logger.info(f"Generating site for project {body.project_id} ({body.business_type})")
    generate_input = GenerateInput(
        business_type=body.business_type,
        business_name=body.business_name,
        business_description=body.business_description,
        business_tagline=body.business_tagline,
        primary_color=body.primary_color,
        secondary_color=body.secondary_color,
    )
    try:
        state = await generator.generate(user_id, body.project_id, generate_input)
    except ProjectNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    except ProviderExhaustedError as e:
        logger.error(f"Site generation for project {body.project_id} got no AI response: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=AI_UNAVAILABLE)
    except ContentGenerationError as e:
        logger.error(f"Site generation for project {body.project_id} failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to generate site")
    return GenerateResponse(site=state)
