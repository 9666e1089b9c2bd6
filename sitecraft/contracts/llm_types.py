"""Typed structures for chat messages, tool schemas and vendor payloads.

Organisation:
  Chat messages     → ``ChatMessage`` (neutral role/content pair)
  Tool schemas      → ``ToolParametersDict``, ``ToolFunctionDict``,
                      ``ToolSchemaDict`` (OpenAI function format, our
                      canonical shape), ``AnthropicToolDict``
  Anthropic wire    → ``AnthropicRequestPayload``, ``AnthropicContentBlock``,
                      ``AnthropicResponse``
  OpenAI wire       → ``OpenAIChatMessage``, ``OpenAIRequestPayload``,
                      ``OpenAIResponse`` and its nested shapes
"""
from __future__ import annotations

from typing import Literal

from typing_extensions import NotRequired, Required, TypedDict

from sitecraft.contracts.json_types import JSONObject


# ── Chat message shapes ────────────────────────────────────────────────────────


class ChatMessage(TypedDict):
    """A provider-neutral chat message."""

    role: Literal["user", "assistant", "system"]
    content: str


# ── Tool schemas ───────────────────────────────────────────────────────────────


class ToolParametersDict(TypedDict, total=False):
    """JSON-schema ``parameters`` block of a tool definition."""

    type: Required[Literal["object"]]
    properties: dict[str, JSONObject]
    required: list[str]


class ToolFunctionDict(TypedDict):
    """The ``function`` member of an OpenAI-format tool schema."""

    name: str
    description: str
    parameters: ToolParametersDict


class ToolSchemaDict(TypedDict):
    """A tool definition in OpenAI function-calling format."""

    type: Literal["function"]
    function: ToolFunctionDict


class AnthropicToolDict(TypedDict):
    """A tool definition in Anthropic Messages API format."""

    name: str
    description: str
    input_schema: ToolParametersDict


# ── Anthropic Messages API ─────────────────────────────────────────────────────


class AnthropicMessage(TypedDict):
    role: Literal["user", "assistant"]
    content: str


class AnthropicRequestPayload(TypedDict, total=False):
    model: Required[str]
    max_tokens: Required[int]
    messages: Required[list[AnthropicMessage]]
    system: str
    tools: list[AnthropicToolDict]
    temperature: float
    stream: bool


class AnthropicContentBlock(TypedDict, total=False):
    type: Required[str]
    text: str
    id: str
    name: str
    input: JSONObject


class AnthropicUsage(TypedDict, total=False):
    input_tokens: int
    output_tokens: int


class AnthropicResponse(TypedDict, total=False):
    id: str
    model: str
    content: list[AnthropicContentBlock]
    stop_reason: str | None
    usage: AnthropicUsage


# ── OpenAI Chat Completions API ────────────────────────────────────────────────


class OpenAIChatMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


class OpenAIRequestPayload(TypedDict, total=False):
    model: Required[str]
    messages: Required[list[OpenAIChatMessage]]
    max_tokens: int
    tools: list[ToolSchemaDict]
    temperature: float
    stream: bool


class OpenAIResponseFunction(TypedDict, total=False):
    name: str
    arguments: str


class OpenAIResponseToolCall(TypedDict, total=False):
    id: str
    type: str
    function: OpenAIResponseFunction
    index: int


class OpenAIResponseMessage(TypedDict, total=False):
    role: str
    content: str | None
    tool_calls: list[OpenAIResponseToolCall]


class OpenAIChoice(TypedDict, total=False):
    index: int
    message: OpenAIResponseMessage
    delta: OpenAIResponseMessage
    finish_reason: str | None


class OpenAIUsage(TypedDict, total=False):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class OpenAIResponse(TypedDict, total=False):
    id: str
    model: str
    choices: list[OpenAIChoice]
    usage: NotRequired[OpenAIUsage]
