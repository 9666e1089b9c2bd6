"""
AI command endpoint.

The editor posts one natural-language command per call; the response carries
the assistant's reply, the per-action results and, when anything changed,
the site's full section list.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from sitecraft.api.dependencies import get_command_service, require_user_id
from sitecraft.config import settings
from sitecraft.core.errors import MemoryConflictError, MemoryNotFoundError
from sitecraft.models.requests import CommandRequest
from sitecraft.models.responses import CommandResponse, MatchedCapability
from sitecraft.services.command import CommandResult, CommandService, ProjectNotFoundError

router = APIRouter()
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)


def _to_response(result: CommandResult) -> CommandResponse:
    return CommandResponse(
        response=result.response,
        blocks=result.blocks,
        actions=[r.to_dict() for r in result.actions],
        matched_capabilities=[
            MatchedCapability(
                id=m.capability.id,
                name=m.capability.name,
                confidence=round(m.confidence, 3),
                matched_triggers=list(m.matched_triggers),
            )
            for m in result.matches[:3]
        ],
    )


@router.post(
    "/ai/command",
    response_model=CommandResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={
        401: {"description": "Missing X-User-Id"},
        404: {"description": "Project not found"},
        409: {"description": "Concurrent memory update"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(settings.command_rate_limit)
async def run_command(
    request: Request,
    body: CommandRequest,
    user_id: str = Depends(require_user_id),
    service: CommandService = Depends(get_command_service),
) -> CommandResponse:
    """Apply a chat command to the project's site."""
    logger.info(f"Command for project {body.project_id} from user {user_id[:8]}...")
    try:
        result = await service.handle(user_id, body)
    except ProjectNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    except MemoryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except MemoryConflictError as e:
        logger.warning(f"Memory conflict during command: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The project was being updated concurrently. Please retry.",
        )
    return _to_response(result)
