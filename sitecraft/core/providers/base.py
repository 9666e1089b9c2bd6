"""Provider-neutral request/response types and the adapter base class.

Adapters translate ``AIRequest`` into one vendor's HTTP API and normalise
whatever comes back into ``AIResponse`` / ``StreamChunk``.  Every vendor
failure surfaces as ``ProviderError``; its ``retryable`` flag is what the
router uses to decide between retrying and moving on.
"""
from __future__ import annotations

import json
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, Literal

import httpx

from sitecraft.contracts.llm_types import ChatMessage, ToolSchemaDict
from sitecraft.core.actions.payloads import ToolCall

logger = logging.getLogger(__name__)

FinishReason = Literal["stop", "tool_use", "max_tokens"]

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class AIRequest:
    """A provider-neutral completion request.

    ``model`` is either an ``AI_MODELS`` alias or a concrete vendor model id;
    ``None`` lets the adapter use its own default.
    """

    messages: list[ChatMessage]
    model: str | None = None
    max_tokens: int | None = None
    system: str | None = None
    tools: list[ToolSchemaDict] | None = None
    temperature: float | None = None


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class AIResponse:
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    model: str = ""
    usage: Usage | None = None
    finish_reason: FinishReason = "stop"

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


@dataclass(frozen=True)
class StreamChunk:
    type: Literal["text", "tool_use", "done"]
    content: str | None = None
    tool_call: ToolCall | None = None


class ProviderError(Exception):
    """A vendor call failed.

    ``retryable`` is true for rate limits, server errors and transport
    failures; client errors (bad request, auth) are not worth repeating.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.retryable = retryable

    @classmethod
    def from_status(cls, message: str, provider: str, status_code: int) -> ProviderError:
        return cls(
            message,
            provider,
            status_code=status_code,
            retryable=status_code == 429 or status_code >= 500,
        )


class ProviderExhaustedError(Exception):
    """Every configured provider failed for one request."""

    def __init__(self, message: str, last_error: Exception | None = None, attempts: int = 0) -> None:
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


class BaseProvider(ABC):
    """Shared HTTP plumbing for vendor adapters.

    The ``httpx.AsyncClient`` is created lazily on first use so an adapter
    can be constructed (and routed around) without a network stack; pass
    ``transport`` to substitute one in tests.
    """

    name: str = ""
    default_model: str = ""

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        default_model: str | None = None,
        timeout: float = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model or self.default_model
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        ...

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the shared ``httpx.AsyncClient``, creating it lazily on first access."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def complete(self, request: AIRequest) -> AIResponse:
        ...

    @abstractmethod
    def stream(self, request: AIRequest) -> AsyncIterator[StreamChunk]:
        ...

    async def _post(self, path: str, payload: object) -> httpx.Response:
        """POST *payload* and return the successful response, or raise ``ProviderError``."""
        try:
            response = await self.client.post(f"{self.base_url}{path}", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 400:
                logger.error(f"{self.name} 400 Bad Request: {e.response.text[:500]}")
            raise ProviderError.from_status(self._error_message(e.response), self.name, status) from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"{self.name} request timed out", self.name, retryable=True) from e
        except httpx.TransportError as e:
            raise ProviderError(f"{self.name} transport error: {e}", self.name, retryable=True) from e
        return response

    async def _raise_for_stream_status(self, response: httpx.Response) -> None:
        if response.status_code == 200:
            return
        body = (await response.aread()).decode(errors="replace")[:500]
        logger.error(f"{self.name} stream error {response.status_code}: {body}")
        raise ProviderError.from_status(
            self._error_message(response, body), self.name, response.status_code
        )

    def _error_message(self, response: httpx.Response, body: str | None = None) -> str:
        """The vendor's own error message when the body carries one."""
        text = body if body is not None else response.text
        try:
            data = json.loads(text)
        except ValueError:
            data = None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return str(error["message"])
        return f"{self.name} returned HTTP {response.status_code}: {text[:200]}"

    @staticmethod
    def _generate_id() -> str:
        return f"call_{secrets.token_hex(6)}"
