"""Health check endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from typing_extensions import TypedDict

from sitecraft.api.dependencies import get_router
from sitecraft.config import settings
from sitecraft.core.providers.router import ProviderRouter

router = APIRouter()


class ProvidersHealthDict(TypedDict):
    """Response shape for ``GET /health/providers``."""

    status: str  # "ok" | "degraded"
    available: list[str]
    default: str


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check."""
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/health/providers")
async def providers_health(
    ai_router: ProviderRouter = Depends(get_router),
) -> ProvidersHealthDict:
    """Which AI providers have credentials configured.

    ``degraded`` means no provider is configured, so every command will get
    the provider-unavailable reply.
    """
    available = ai_router.get_available_providers()
    return {
        "status": "ok" if available else "degraded",
        "available": available,
        "default": ai_router.default_provider,
    }
