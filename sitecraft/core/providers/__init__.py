"""LLM vendor adapters and the retrying, falling-back router in front of them."""
from __future__ import annotations

from sitecraft.core.providers.anthropic import AnthropicProvider
from sitecraft.core.providers.base import (
    AIRequest,
    AIResponse,
    BaseProvider,
    ProviderError,
    ProviderExhaustedError,
    StreamChunk,
    Usage,
)
from sitecraft.core.providers.models import AI_MODELS, AIModel, ProviderName, select_model
from sitecraft.core.providers.openai import OpenAIProvider
from sitecraft.core.providers.router import ProviderRouter, build_providers, build_router

__all__ = [
    "AI_MODELS",
    "AIModel",
    "AIRequest",
    "AIResponse",
    "AnthropicProvider",
    "BaseProvider",
    "OpenAIProvider",
    "ProviderError",
    "ProviderExhaustedError",
    "ProviderName",
    "ProviderRouter",
    "StreamChunk",
    "Usage",
    "build_providers",
    "build_router",
    "select_model",
]
