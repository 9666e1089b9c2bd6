"""
Tests for the HTTP API (health, AI command, suggestions, generation, onboarding pipeline).

The lifespan handler is not run under ASGITransport, so application objects
are supplied through ``app.dependency_overrides``.
"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sitecraft.api.dependencies import get_command_service, get_repositories, get_router, get_site_generator
from sitecraft.api.routes import command as command_routes
from sitecraft.api.routes import generate as generate_routes
from sitecraft.core.actions.payloads import ToolCall
from sitecraft.core.memory import KeyedLocks, ProjectMemoryStore
from sitecraft.core.providers import AIResponse, ProviderExhaustedError
from sitecraft.main import app
from sitecraft.models.site import SiteState
from sitecraft.services.command import CommandService
from sitecraft.services.generation import SiteGenerator
from sitecraft.services.repositories import Repositories

USER_HEADERS = {"X-User-Id": "user-1"}


@pytest.fixture
def ai_router() -> MagicMock:
    router = MagicMock()
    router.complete = AsyncMock(return_value=AIResponse(content="Happy to help."))
    router.get_available_providers.return_value = ["claude"]
    router.default_provider = "claude"
    return router


@pytest_asyncio.fixture
async def client(ai_router: MagicMock, repositories: Repositories, locks: KeyedLocks, site_state: SiteState):
    """Client with a seeded project ``proj-1`` owned by ``user-1``."""
    await repositories.sites.create(site_state, owner_id="user-1")
    service = CommandService(
        ai_router,
        sites=repositories.sites,
        user_memory=repositories.user_memory,
        project_memory=repositories.project_memory,
        sessions=repositories.sessions,
        locks=locks,
    )
    app.dependency_overrides[get_router] = lambda: ai_router
    app.dependency_overrides[get_repositories] = lambda: repositories
    generator = SiteGenerator(ai_router, repositories.sites, repositories.project_memory, locks=locks)
    app.dependency_overrides[get_command_service] = lambda: service
    app.dependency_overrides[get_site_generator] = lambda: generator
    command_routes.limiter.reset()
    generate_routes.limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["service"] == "SiteCraft"
    assert resp.headers["X-Frame-Options"] == "DENY"


@pytest.mark.asyncio
async def test_providers_health(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/health/providers")

    assert resp.json() == {"status": "ok", "available": ["claude"], "default": "claude"}


@pytest.mark.asyncio
async def test_providers_health_degraded(client: AsyncClient, ai_router: MagicMock) -> None:
    ai_router.get_available_providers.return_value = []

    resp = await client.get("/api/v1/health/providers")

    assert resp.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_root(client: AsyncClient) -> None:
    resp = await client.get("/")
    assert resp.json()["service"] == "SiteCraft"


# -----------------------------------------------------------------------------
# POST /ai/command
# -----------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_command_requires_user(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/ai/command", json={"projectId": "proj-1", "command": "hi"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Unauthorized"


@pytest.mark.asyncio
async def test_command_unknown_project(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/ai/command",
        json={"projectId": "nope", "command": "hi"},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Project not found"


@pytest.mark.asyncio
async def test_command_rejects_empty_command(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/ai/command",
        json={"projectId": "proj-1", "command": ""},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_command_text_reply(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/ai/command",
        json={"projectId": "proj-1", "command": "What can you do?"},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["response"] == "Happy to help."
    assert "blocks" not in body
    assert body["actions"] == []


@pytest.mark.asyncio
async def test_command_with_actions(client: AsyncClient, ai_router: MagicMock) -> None:
    ai_router.complete.return_value = AIResponse(
        content="Here you go.",
        tool_calls=[ToolCall(
            name="add_section",
            arguments={"section_type": "pricing", "position": "after_hero", "content": {"title": "Plans"}},
        )],
    )

    resp = await client.post(
        "/api/v1/ai/command",
        json={"projectId": "proj-1", "command": "add a pricing table after the hero"},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["response"] == "Here you go.\n- Done: Added pricing section"
    assert [b["type"] for b in body["blocks"]][:2] == ["hero", "pricing"]
    assert body["blocks"][1]["title"] == "Plans"
    assert body["actions"][0]["success"] is True
    match = body["matchedCapabilities"][0]
    assert match["id"] == "add_section"
    assert "matchedTriggers" in match
    assert len(body["matchedCapabilities"]) <= 3


@pytest.mark.asyncio
async def test_command_rate_limited(client: AsyncClient, ai_router: MagicMock) -> None:
    payload = {"projectId": "proj-1", "command": "hi"}

    statuses = [
        (await client.post("/api/v1/ai/command", json=payload, headers=USER_HEADERS)).status_code
        for _ in range(31)
    ]

    assert statuses[:30] == [200] * 30
    assert statuses[30] == 429


# -----------------------------------------------------------------------------
# POST /pipeline
# -----------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_pipeline_requires_user(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/pipeline", json={"action": "get_defaults", "data": {}})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_pipeline_get_defaults(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={"action": "get_defaults", "data": {"businessType": "restaurant"}},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "primaryColor": "#dc2626",
        "secondaryColor": "#aa0000",
        "headingFont": "Playfair Display",
        "bodyFont": "Lato",
        "siteGoals": ["Showcase menu", "Enable reservations", "Show location & hours"],
        "selectedSections": ["hero", "menu", "about", "gallery", "contact", "location"],
    }


@pytest.mark.asyncio
async def test_pipeline_get_defaults_unknown_type(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={"action": "get_defaults", "data": {}},
        headers=USER_HEADERS,
    )

    body = resp.json()
    assert body["primaryColor"] == "#2563eb"
    assert body["headingFont"] == "Inter"
    assert body["siteGoals"] == []
    assert body["selectedSections"] == ["hero", "about", "contact"]


@pytest.mark.asyncio
async def test_pipeline_unknown_action(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={"action": "launch_rocket", "data": {}},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Unknown action"


@pytest.mark.asyncio
async def test_pipeline_validate_step(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={"action": "validate_step", "data": {"step": "business_info", "businessName": "Acme"}},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["isValid"] is False
    assert body["missingFields"] == ["businessType", "businessDescription"]
    assert [q["field"] for q in body["questions"]] == ["businessType", "businessDescription"]


@pytest.mark.asyncio
async def test_pipeline_validate_unknown_step(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={"action": "validate_step", "data": {"step": "launch"}},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Unknown step: launch"


@pytest.mark.asyncio
async def test_pipeline_save_discovery(
    client: AsyncClient, repositories: Repositories, locks: KeyedLocks
) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={
            "action": "save_discovery",
            "data": {
                "projectId": "proj-1",
                "existingWebsite": {"url": "https://acme.example", "title": "Acme Bakery"},
                "domain": "acme.example",
            },
        },
        headers=USER_HEADERS,
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Discovery data saved"}

    info = await ProjectMemoryStore("proj-1", repositories.project_memory, locks).get_discovered_info()
    assert info.domain == "acme.example"
    assert info.existing_website is not None
    assert info.existing_website.title == "Acme Bakery"


@pytest.mark.asyncio
async def test_pipeline_save_discovery_requires_project(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={"action": "save_discovery", "data": {"domain": "acme.example"}},
        headers=USER_HEADERS,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_pipeline_save_discovery_other_users_project(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={"action": "save_discovery", "data": {"projectId": "proj-1"}},
        headers={"X-User-Id": "someone-else"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_pipeline_save_discovery_malformed(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/pipeline",
        json={
            "action": "save_discovery",
            "data": {"projectId": "proj-1", "existingWebsite": {"title": "No url"}},
        },
        headers=USER_HEADERS,
    )
    assert resp.status_code == 400


# -----------------------------------------------------------------------------
# POST /ai/suggest
# -----------------------------------------------------------------------------

SUGGEST_BODY = {
    "field": "businessTagline",
    "currentValue": "",
    "businessContext": {"type": "restaurant", "name": "Acme Bakery"},
}


@pytest.mark.asyncio
async def test_suggest(client: AsyncClient, ai_router: MagicMock) -> None:
    ai_router.complete.return_value = AIResponse(content="Bread, better.\n\nBaked at dawn\nYour corner bakery\nExtra")

    resp = await client.post("/api/v1/ai/suggest", json=SUGGEST_BODY, headers=USER_HEADERS)

    assert resp.status_code == 200
    assert resp.json() == {"suggestions": ["Bread, better.", "Baked at dawn", "Your corner bakery"]}
    request = ai_router.complete.await_args.args[0]
    assert request.temperature == 0.8


@pytest.mark.asyncio
async def test_suggest_requires_user(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/ai/suggest", json=SUGGEST_BODY)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_suggest_requires_business_context(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/ai/suggest",
        json={"field": "businessTagline", "businessContext": {"type": "restaurant"}},
        headers=USER_HEADERS,
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_suggest_provider_outage(client: AsyncClient, ai_router: MagicMock) -> None:
    ai_router.complete.side_effect = ProviderExhaustedError("All AI providers failed")

    resp = await client.post("/api/v1/ai/suggest", json=SUGGEST_BODY, headers=USER_HEADERS)

    assert resp.status_code == 503
    assert resp.json()["detail"] == "AI service unavailable"


# -----------------------------------------------------------------------------
# POST /generate
# -----------------------------------------------------------------------------

GENERATED_SITE = json.dumps({
    "meta": {"title": "Acme Bakery", "description": "Fresh bread"},
    "sections": [
        {"type": "hero", "title": "Bread, better."},
        {"type": "contact", "title": "Say hello"},
    ],
})


@pytest.mark.asyncio
async def test_generate_new_site(client: AsyncClient, ai_router: MagicMock, repositories: Repositories) -> None:
    ai_router.complete.return_value = AIResponse(content=GENERATED_SITE)

    resp = await client.post(
        "/api/v1/generate",
        json={"projectId": "proj-2", "businessName": "Acme Bakery", "businessType": "restaurant"},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 200
    site = resp.json()["site"]
    assert site["projectId"] == "proj-2"
    assert [s["type"] for s in site["sections"]] == ["hero", "contact"]
    assert site["styles"]["primaryColor"] == "#dc2626"
    assert await repositories.sites.get("proj-2", "user-1") is not None


@pytest.mark.asyncio
async def test_generate_other_users_project(client: AsyncClient, ai_router: MagicMock) -> None:
    ai_router.complete.return_value = AIResponse(content=GENERATED_SITE)

    resp = await client.post(
        "/api/v1/generate",
        json={"projectId": "proj-1", "businessName": "Mine now"},
        headers={"X-User-Id": "someone-else"},
    )

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_generate_unusable_reply(client: AsyncClient, ai_router: MagicMock) -> None:
    ai_router.complete.return_value = AIResponse(content="I can't help with that.")

    resp = await client.post(
        "/api/v1/generate",
        json={"projectId": "proj-1", "businessName": "Acme Bakery"},
        headers=USER_HEADERS,
    )

    assert resp.status_code == 502
    assert resp.json()["detail"] == "Failed to generate site"


@pytest.mark.asyncio
async def test_generate_rejects_bad_color(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/generate",
        json={"projectId": "proj-1", "businessName": "Acme", "primaryColor": "red"},
        headers=USER_HEADERS,
    )
    assert resp.status_code == 422
