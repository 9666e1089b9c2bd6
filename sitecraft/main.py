"""
SiteCraft API

FastAPI application for AI-assisted website editing.
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from sitecraft.api.routes import command, generate, health, pipeline
from sitecraft.config import settings
from sitecraft.core.providers.router import build_router
from sitecraft.db import close_db, get_session_factory, init_db
from sitecraft.services.command import CommandService
from sitecraft.services.generation import SiteGenerator
from sitecraft.services.repositories import sql_repositories


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Default AI provider: {settings.default_provider} ({settings.default_model})")

    try:
        await init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    router = build_router(settings)
    repositories = sql_repositories(get_session_factory())
    app.state.router = router
    app.state.repositories = repositories
    app.state.command_service = CommandService(
        router=router,
        sites=repositories.sites,
        user_memory=repositories.user_memory,
        project_memory=repositories.project_memory,
        sessions=repositories.sessions,
        model=settings.default_model,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
        timeout=settings.llm_timeout,
        history_limit=settings.history_limit,
    )
    app.state.site_generator = SiteGenerator(
        router=router,
        sites=repositories.sites,
        project_memory=repositories.project_memory,
        timeout=settings.llm_timeout,
    )

    yield

    logger.info("Shutting down...")
    await router.close()
    await close_db()


app = FastAPI(
    title="SiteCraft API",
    version=settings.app_version,
    description="AI command orchestration for the SiteCraft website builder.",
    lifespan=lifespan,
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# Adapter: FastAPI expects (Request, Exception) but slowapi's handler
# takes (Request, RateLimitExceeded).
def _handle_rate_limit(request: Request, exc: Exception) -> Response:
    if isinstance(exc, RateLimitExceeded):
        return _rate_limit_exceeded_handler(request, exc)
    raise exc


app.state.limiter = command.limiter
app.add_exception_handler(RateLimitExceeded, _handle_rate_limit)

app.add_middleware(SecurityHeadersMiddleware)

if "*" in settings.cors_origins:
    logger.warning(
        "SECURITY WARNING: CORS allows all origins. "
        "Set SITECRAFT_CORS_ORIGINS to specific domains in production."
    )
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(command.router, prefix="/api/v1", tags=["ai"])
app.include_router(generate.router, prefix="/api/v1", tags=["ai"])
app.include_router(pipeline.router, prefix="/api/v1", tags=["pipeline"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with service info."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
