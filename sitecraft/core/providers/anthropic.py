"""Anthropic Messages API adapter."""
from __future__ import annotations

import json
import logging
import time
from typing import AsyncIterator

import httpx

from sitecraft.contracts.json_types import JSONObject
from sitecraft.contracts.llm_types import (
    AnthropicMessage,
    AnthropicRequestPayload,
    AnthropicResponse,
    AnthropicToolDict,
    ChatMessage,
    ToolSchemaDict,
)
from sitecraft.core.actions.payloads import ToolCall
from sitecraft.core.providers.base import (
    AIRequest,
    AIResponse,
    BaseProvider,
    FinishReason,
    ProviderError,
    StreamChunk,
    Usage,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096


def format_tools(tools: list[ToolSchemaDict]) -> list[AnthropicToolDict]:
    """OpenAI function schemas → Anthropic ``input_schema`` tools."""
    return [
        AnthropicToolDict(
            name=t["function"]["name"],
            description=t["function"]["description"],
            input_schema=t["function"]["parameters"],
        )
        for t in tools
    ]


def format_messages(messages: list[ChatMessage]) -> list[AnthropicMessage]:
    """Drop system messages; Anthropic takes the system prompt separately."""
    return [
        AnthropicMessage(role=m["role"], content=m["content"])
        for m in messages
        if m["role"] != "system"
    ]


def _finish_reason(stop_reason: str | None) -> FinishReason:
    if stop_reason == "tool_use":
        return "tool_use"
    if stop_reason == "max_tokens":
        return "max_tokens"
    return "stop"


class AnthropicProvider(BaseProvider):
    name = "claude"
    default_model = "claude-sonnet-4-20250514"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.anthropic.com",
        default_model: str | None = None,
        timeout: float = 120,
        api_version: str = "2023-06-01",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_version = api_version
        super().__init__(api_key, base_url, default_model, timeout, transport)

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

    def _payload(self, request: AIRequest, stream: bool = False) -> AnthropicRequestPayload:
        payload: AnthropicRequestPayload = {
            "model": request.model or self.default_model,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": format_messages(request.messages),
        }
        if request.system:
            payload["system"] = request.system
        if request.tools:
            payload["tools"] = format_tools(request.tools)
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if stream:
            payload["stream"] = True
        return payload

    async def complete(self, request: AIRequest) -> AIResponse:
        payload = self._payload(request)
        logger.debug(
            f"Anthropic request: model={payload['model']}, {len(payload['messages'])} messages, "
            f"{len(request.tools or [])} tools"
        )
        start = time.time()
        response = await self._post("/v1/messages", payload)
        data: AnthropicResponse = response.json()
        parsed = self._parse_response(data)
        usage = parsed.usage or Usage()
        logger.info(
            f"Anthropic: {time.time() - start:.2f}s, {usage.input_tokens} input, "
            f"{usage.output_tokens} output tokens"
        )
        return parsed

    def _parse_response(self, data: AnthropicResponse) -> AIResponse:
        blocks = data.get("content") or []
        text = next((b.get("text", "") for b in blocks if b.get("type") == "text"), "")
        tool_calls = [
            ToolCall(id=b.get("id", ""), name=b.get("name", ""), arguments=b.get("input") or {})
            for b in blocks
            if b.get("type") == "tool_use"
        ]
        usage = data.get("usage")
        return AIResponse(
            content=text,
            tool_calls=tool_calls,
            model=data.get("model", ""),
            usage=Usage(
                input_tokens=usage.get("input_tokens", 0),
                output_tokens=usage.get("output_tokens", 0),
            ) if usage else None,
            finish_reason=_finish_reason(data.get("stop_reason")),
        )

    async def stream(self, request: AIRequest) -> AsyncIterator[StreamChunk]:
        """Stream text deltas; a tool call is yielded once its input is complete."""
        payload = self._payload(request, stream=True)
        tool_blocks: dict[int, ToolCall] = {}
        tool_inputs: dict[int, list[str]] = {}

        try:
            async with self.client.stream("POST", f"{self.base_url}/v1/messages", json=payload) as response:
                await self._raise_for_stream_status(response)
                async for line in response.aiter_lines():
                    if not line or not line.startswith("data: "):
                        continue
                    try:
                        event: JSONObject = json.loads(line[6:])
                    except json.JSONDecodeError:
                        continue

                    event_type = event.get("type")
                    index = event.get("index")
                    index = index if isinstance(index, int) else 0

                    if event_type == "content_block_start":
                        block = event.get("content_block")
                        if isinstance(block, dict) and block.get("type") == "tool_use":
                            tool_blocks[index] = ToolCall(
                                id=str(block.get("id") or self._generate_id()),
                                name=str(block.get("name") or ""),
                            )
                            tool_inputs[index] = []
                    elif event_type == "content_block_delta":
                        delta = event.get("delta")
                        if not isinstance(delta, dict):
                            continue
                        if delta.get("type") == "text_delta":
                            text = delta.get("text")
                            if isinstance(text, str) and text:
                                yield StreamChunk(type="text", content=text)
                        elif delta.get("type") == "input_json_delta" and index in tool_inputs:
                            partial = delta.get("partial_json")
                            if isinstance(partial, str):
                                tool_inputs[index].append(partial)
                    elif event_type == "content_block_stop" and index in tool_blocks:
                        call = tool_blocks.pop(index)
                        raw = "".join(tool_inputs.pop(index, []))
                        try:
                            arguments = json.loads(raw) if raw else {}
                        except json.JSONDecodeError:
                            logger.error(f"Anthropic stream: unparseable input for tool {call.name}")
                            arguments = {}
                        yield StreamChunk(
                            type="tool_use",
                            tool_call=ToolCall(
                                id=call.id,
                                name=call.name,
                                arguments=arguments if isinstance(arguments, dict) else {},
                            ),
                        )
                    elif event_type == "message_stop":
                        yield StreamChunk(type="done")
                    elif event_type == "error":
                        error = event.get("error")
                        message = error.get("message") if isinstance(error, dict) else None
                        raise ProviderError(str(message or "stream error"), self.name, retryable=True)
        except httpx.TimeoutException as e:
            raise ProviderError(f"{self.name} stream timed out", self.name, retryable=True) from e
        except httpx.TransportError as e:
            raise ProviderError(f"{self.name} transport error: {e}", self.name, retryable=True) from e
