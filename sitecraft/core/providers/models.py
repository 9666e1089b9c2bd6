"""Model registry and task-based model selection.

Aliases (``claude-sonnet``, ``gpt-4o-mini`` ...) are what callers and
settings name; ``AIModel.model_id`` is what the owning vendor's API expects.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class ProviderName(str, Enum):
    CLAUDE = "claude"
    OPENAI = "openai"
    GEMINI = "gemini"
    LOCAL = "local"


Speed = Literal["fast", "medium", "slow"]
Quality = Literal["high", "medium", "low"]
Task = Literal["generation", "chat", "analysis", "quick"]


@dataclass(frozen=True)
class AIModel:
    provider: ProviderName
    model_id: str
    name: str
    context_window: int
    max_output: int
    cost_per_1k_input: float
    cost_per_1k_output: float
    supports_tools: bool = True
    supports_vision: bool = True
    speed: Speed = "fast"
    quality: Quality = "high"


AI_MODELS: dict[str, AIModel] = {
    "claude-sonnet": AIModel(
        provider=ProviderName.CLAUDE,
        model_id="claude-sonnet-4-20250514",
        name="Claude Sonnet",
        context_window=200_000,
        max_output=8192,
        cost_per_1k_input=0.003,
        cost_per_1k_output=0.015,
    ),
    "claude-opus": AIModel(
        provider=ProviderName.CLAUDE,
        model_id="claude-opus-4-20250514",
        name="Claude Opus",
        context_window=200_000,
        max_output=8192,
        cost_per_1k_input=0.015,
        cost_per_1k_output=0.075,
        speed="slow",
    ),
    "claude-haiku": AIModel(
        provider=ProviderName.CLAUDE,
        model_id="claude-3-5-haiku-20241022",
        name="Claude Haiku",
        context_window=200_000,
        max_output=8192,
        cost_per_1k_input=0.0008,
        cost_per_1k_output=0.004,
        quality="medium",
    ),
    "gpt-4o": AIModel(
        provider=ProviderName.OPENAI,
        model_id="gpt-4o",
        name="GPT-4o",
        context_window=128_000,
        max_output=4096,
        cost_per_1k_input=0.005,
        cost_per_1k_output=0.015,
    ),
    "gpt-4o-mini": AIModel(
        provider=ProviderName.OPENAI,
        model_id="gpt-4o-mini",
        name="GPT-4o Mini",
        context_window=128_000,
        max_output=16384,
        cost_per_1k_input=0.00015,
        cost_per_1k_output=0.0006,
        quality="medium",
    ),
    "gemini-pro": AIModel(
        provider=ProviderName.GEMINI,
        model_id="gemini-1.5-pro",
        name="Gemini 1.5 Pro",
        context_window=1_000_000,
        max_output=8192,
        cost_per_1k_input=0.00125,
        cost_per_1k_output=0.005,
        speed="medium",
    ),
}


_MODELS_BY_ID: dict[str, AIModel] = {m.model_id: m for m in AI_MODELS.values()}


def get_model(model: str | None) -> AIModel | None:
    """Look *model* up by alias first, then by vendor model id."""
    if not model:
        return None
    return AI_MODELS.get(model) or _MODELS_BY_ID.get(model)


def select_model(task: str, quality: Quality = "high", default: str = "claude-sonnet") -> str:
    """Pick a model alias for *task*.  Pure lookup; unknown tasks get *default*."""
    if task == "generation":
        return "claude-sonnet" if quality == "high" else "claude-haiku"
    if task == "chat":
        return "claude-sonnet" if quality == "high" else "gpt-4o-mini"
    if task == "analysis":
        return "claude-sonnet"
    if task == "quick":
        return "claude-haiku"
    return default
