"""Onboarding field suggestions.

While a user fills in the onboarding form they can ask for ideas for a
single field (tagline, description, ...).  One completion is requested and
its first three non-empty lines are the suggestions.
"""
from __future__ import annotations

import logging

from sitecraft.contracts.llm_types import ChatMessage
from sitecraft.core.capabilities.prompt_builder import BusinessInfo, build_onboarding_suggestion_prompt
from sitecraft.core.providers.base import AIRequest
from sitecraft.core.providers.router import ProviderRouter

logger = logging.getLogger(__name__)

SUGGESTION_SYSTEM_PROMPT = """You are a helpful assistant that generates creative and professional suggestions for business websites.
Always return exactly 3 suggestions, one per line, with no numbering, bullets, or extra formatting.
Make suggestions specific to the business type and context."""

MAX_SUGGESTIONS = 3
SUGGESTION_MAX_TOKENS = 500
SUGGESTION_TEMPERATURE = 0.8


def parse_suggestions(text: str, limit: int = MAX_SUGGESTIONS) -> list[str]:
    lines = (line.strip() for line in text.split("\n"))
    return [line for line in lines if line][:limit]


async def suggest_field_values(
    router: ProviderRouter,
    field: str,
    business: BusinessInfo,
    current_value: str = "",
    timeout: float | None = None,
) -> list[str]:
    """Ask the model for up to three values for *field*.

    Raises:
        ProviderExhaustedError: no provider produced a response.
    """
    prompt = build_onboarding_suggestion_prompt(field, current_value, business)
    response = await router.complete(
        AIRequest(
            messages=[ChatMessage(role="user", content=prompt)],
            system=SUGGESTION_SYSTEM_PROMPT,
            max_tokens=SUGGESTION_MAX_TOKENS,
            temperature=SUGGESTION_TEMPERATURE,
        ),
        timeout=timeout,
    )
    suggestions = parse_suggestions(response.content)
    logger.debug(f"Got {len(suggestions)} suggestions for {field}")
    return suggestions
