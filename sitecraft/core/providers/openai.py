"""OpenAI Chat Completions adapter."""
from __future__ import annotations

import json
import logging
import time
from typing import AsyncIterator

import httpx

from sitecraft.contracts.json_types import JSONObject
from sitecraft.contracts.llm_types import (
    ChatMessage,
    OpenAIChatMessage,
    OpenAIRequestPayload,
    OpenAIResponse,
    OpenAIResponseToolCall,
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


def format_messages(messages: list[ChatMessage], system: str | None = None) -> list[OpenAIChatMessage]:
    """Prepend *system* as a system message; everything else passes through."""
    formatted: list[OpenAIChatMessage] = []
    if system:
        formatted.append(OpenAIChatMessage(role="system", content=system))
    formatted.extend(OpenAIChatMessage(role=m["role"], content=m["content"]) for m in messages)
    return formatted


def _finish_reason(reason: str | None) -> FinishReason:
    if reason == "tool_calls":
        return "tool_use"
    if reason == "length":
        return "max_tokens"
    return "stop"


def _parse_arguments(raw: str | None) -> JSONObject:
    if not raw:
        return {}
    parsed = json.loads(raw)
    return parsed if isinstance(parsed, dict) else {}


class OpenAIProvider(BaseProvider):
    name = "openai"
    default_model = "gpt-4o"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.openai.com",
        default_model: str | None = None,
        timeout: float = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(api_key, base_url, default_model, timeout, transport)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _payload(self, request: AIRequest, stream: bool = False) -> OpenAIRequestPayload:
        payload: OpenAIRequestPayload = {
            "model": request.model or self.default_model,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": format_messages(request.messages, request.system),
        }
        if request.tools:
            payload["tools"] = request.tools
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if stream:
            payload["stream"] = True
        return payload

    async def complete(self, request: AIRequest) -> AIResponse:
        payload = self._payload(request)
        logger.debug(
            f"OpenAI request: model={payload['model']}, {len(payload['messages'])} messages, "
            f"{len(request.tools or [])} tools"
        )
        start = time.time()
        response = await self._post("/v1/chat/completions", payload)
        data: OpenAIResponse = response.json()
        parsed = self._parse_response(data)
        usage = parsed.usage or Usage()
        logger.info(
            f"OpenAI: {time.time() - start:.2f}s, {usage.input_tokens} prompt, "
            f"{usage.output_tokens} completion tokens"
        )
        return parsed

    def _parse_response(self, data: OpenAIResponse) -> AIResponse:
        """Parse a non-streaming response into an ``AIResponse``."""
        choices = data.get("choices") or []
        choice = choices[0] if choices else None
        message = choice.get("message") if choice else None

        tool_calls: list[ToolCall] = []
        for tc in (message.get("tool_calls") if message else None) or []:
            fn = tc.get("function") or {}
            try:
                arguments = _parse_arguments(fn.get("arguments"))
            except json.JSONDecodeError as e:
                raise ProviderError(
                    f"Malformed tool call arguments for {fn.get('name', '')}: {e}", self.name
                ) from e
            tool_calls.append(ToolCall(id=tc.get("id") or "", name=fn.get("name", ""), arguments=arguments))

        usage = data.get("usage")
        return AIResponse(
            content=(message.get("content") if message else None) or "",
            tool_calls=tool_calls,
            model=data.get("model", ""),
            usage=Usage(
                input_tokens=usage.get("prompt_tokens", 0),
                output_tokens=usage.get("completion_tokens", 0),
            ) if usage else None,
            finish_reason=_finish_reason(choice.get("finish_reason") if choice else None),
        )

    async def stream(self, request: AIRequest) -> AsyncIterator[StreamChunk]:
        """Stream text deltas; tool calls are accumulated by index and yielded at the finish."""
        payload = self._payload(request, stream=True)
        pending: dict[int, OpenAIResponseToolCall] = {}
        finished = False

        try:
            async with self.client.stream(
                "POST", f"{self.base_url}/v1/chat/completions", json=payload
            ) as response:
                await self._raise_for_stream_status(response)
                async for line in response.aiter_lines():
                    if not line or not line.startswith("data: "):
                        continue
                    data_str = line[6:]
                    if data_str.strip() == "[DONE]":
                        break
                    try:
                        chunk: OpenAIResponse = json.loads(data_str)
                    except json.JSONDecodeError:
                        continue

                    chunk_choices = chunk.get("choices") or []
                    choice = chunk_choices[0] if chunk_choices else None
                    if choice is None:
                        continue

                    delta = choice.get("delta") or {}
                    if content := delta.get("content"):
                        yield StreamChunk(type="text", content=content)

                    for tc in delta.get("tool_calls") or []:
                        idx = tc.get("index") or 0
                        entry = pending.setdefault(idx, {"id": "", "function": {"name": "", "arguments": ""}})
                        if tc_id := tc.get("id"):
                            entry["id"] = tc_id
                        if tc_func := tc.get("function"):
                            if tc_name := tc_func.get("name"):
                                entry["function"]["name"] = tc_name
                            if tc_args := tc_func.get("arguments"):
                                entry["function"]["arguments"] = entry["function"].get("arguments", "") + tc_args

                    if choice.get("finish_reason") and not finished:
                        finished = True
                        for chunk_out in self._flush_tool_calls(pending):
                            yield chunk_out
                        yield StreamChunk(type="done")
        except httpx.TimeoutException as e:
            raise ProviderError(f"{self.name} stream timed out", self.name, retryable=True) from e
        except httpx.TransportError as e:
            raise ProviderError(f"{self.name} transport error: {e}", self.name, retryable=True) from e

        if not finished:
            for chunk_out in self._flush_tool_calls(pending):
                yield chunk_out
            yield StreamChunk(type="done")

    def _flush_tool_calls(self, pending: dict[int, OpenAIResponseToolCall]) -> list[StreamChunk]:
        chunks: list[StreamChunk] = []
        for idx in sorted(pending):
            entry = pending[idx]
            fn = entry.get("function") or {}
            name = fn.get("name", "")
            if not name:
                continue
            try:
                arguments = _parse_arguments(fn.get("arguments"))
            except json.JSONDecodeError:
                logger.error(f"OpenAI stream: unparseable arguments for tool {name}")
                arguments = {}
            chunks.append(StreamChunk(
                type="tool_use",
                tool_call=ToolCall(id=entry.get("id") or self._generate_id(), name=name, arguments=arguments),
            ))
        pending.clear()
        return chunks
