"""
FastAPI dependencies.

Application-wide objects (router, repositories, command service) are built
once in the lifespan handler and stored on ``app.state``; these accessors
hand them to route handlers so tests can swap them with
``app.dependency_overrides``.
"""
from __future__ import annotations

import logging

from fastapi import Header, HTTPException, Request, status

from sitecraft.core.providers.router import ProviderRouter
from sitecraft.services.command import CommandService
from sitecraft.services.generation import SiteGenerator
from sitecraft.services.repositories import Repositories

logger = logging.getLogger(__name__)


def get_router(request: Request) -> ProviderRouter:
    router: ProviderRouter = request.app.state.router
    return router


def get_repositories(request: Request) -> Repositories:
    repositories: Repositories = request.app.state.repositories
    return repositories


def get_command_service(request: Request) -> CommandService:
    service: CommandService = request.app.state.command_service
    return service


async def require_user_id(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> str:
    """
    Require the caller's user id.

    Raises:
        HTTPException 401: If X-User-Id is missing or blank.
    """
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request without X-User-Id")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return x_user_id.strip()


def get_site_generator(request: Request) -> SiteGenerator:
    generator: SiteGenerator = request.app.state.site_generator
    return generator
