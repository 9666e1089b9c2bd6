"""ProviderRouter: retry and fallback across configured LLM vendors.

Provider order for a request is the vendor owning the requested model,
then the default provider, then the fallbacks, each at most once and only if
configured.  Attempts are strictly sequential.  Each provider gets up to
``retry_attempts`` tries with a linear delay between them; a non-retryable
``ProviderError`` moves straight on to the next provider.

The router is a plain object built once (``build_router``) and passed to
whoever needs it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Mapping, Sequence

from sitecraft.config import Settings
from sitecraft.core.providers.anthropic import AnthropicProvider
from sitecraft.core.providers.base import (
    AIRequest,
    AIResponse,
    BaseProvider,
    ProviderError,
    ProviderExhaustedError,
    StreamChunk,
)
from sitecraft.core.providers.models import ProviderName, Quality, get_model
from sitecraft.core.providers.models import select_model as _select_model
from sitecraft.core.providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)


class ProviderRouter:
    def __init__(
        self,
        providers: Mapping[str, BaseProvider],
        default_provider: str = ProviderName.CLAUDE.value,
        default_model: str = "claude-sonnet",
        fallback_providers: Sequence[str] = (ProviderName.OPENAI.value,),
        retry_attempts: int = 2,
        retry_delay: float = 1.0,
    ) -> None:
        if retry_attempts < 1:
            raise ValueError("retry_attempts must be at least 1")
        self._providers = dict(providers)
        self.default_provider = default_provider
        self.default_model = default_model
        self.fallback_providers = list(fallback_providers)
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay

    # --- Introspection ---

    def get_provider(self, name: str) -> BaseProvider | None:
        return self._providers.get(name)

    def is_provider_available(self, name: str) -> bool:
        provider = self._providers.get(name)
        return provider is not None and provider.is_configured()

    def get_available_providers(self) -> list[str]:
        return [name for name, p in self._providers.items() if p.is_configured()]

    def providers_to_try(self, model: str | None = None) -> list[str]:
        """Configured providers for *model*, in the order they will be tried."""
        order: list[str] = []
        info = get_model(model)
        if info is not None:
            order.append(info.provider.value)
        order.append(self.default_provider)
        order.extend(self.fallback_providers)

        seen: set[str] = set()
        result: list[str] = []
        for name in order:
            if name in seen or not self.is_provider_available(name):
                continue
            seen.add(name)
            result.append(name)
        return result

    def _request_for(self, provider_name: str, request: AIRequest) -> AIRequest:
        """Give the owning provider the concrete id of a registered model.

        The model may be named by alias or by vendor id.  Any other provider
        gets ``model=None`` and uses its own default; an unregistered model
        name passes through untouched.
        """
        info = get_model(request.model)
        if info is None:
            return request
        model = info.model_id if info.provider.value == provider_name else None
        return AIRequest(
            messages=request.messages,
            model=model,
            max_tokens=request.max_tokens,
            system=request.system,
            tools=request.tools,
            temperature=request.temperature,
        )

    # --- Completion ---

    async def complete(self, request: AIRequest, timeout: float | None = None) -> AIResponse:
        """Return the first successful response.

        *timeout* bounds each attempt.  Cancelling the caller cancels the
        in-flight attempt and propagates; nothing is retried after that.
        """
        providers = self.providers_to_try(request.model)
        last_error: Exception | None = None
        attempts = 0

        for name in providers:
            provider = self._providers[name]
            provider_request = self._request_for(name, request)

            for attempt in range(self.retry_attempts):
                attempts += 1
                try:
                    if timeout is None:
                        return await provider.complete(provider_request)
                    return await asyncio.wait_for(provider.complete(provider_request), timeout=timeout)
                except ProviderError as e:
                    last_error = e
                    logger.warning(
                        f"Provider {name} attempt {attempt + 1}/{self.retry_attempts} failed: "
                        f"{e} (status={e.status_code}, retryable={e.retryable})"
                    )
                    if not e.retryable:
                        break
                except asyncio.TimeoutError:
                    last_error = ProviderError(
                        f"{name} did not respond within {timeout}s", name, retryable=True
                    )
                    logger.warning(f"Provider {name} attempt {attempt + 1}/{self.retry_attempts} timed out")
                except Exception as e:
                    last_error = e
                    logger.warning(f"Provider {name} attempt {attempt + 1}/{self.retry_attempts} raised: {e}")

                if attempt < self.retry_attempts - 1:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))

        if not providers:
            logger.error("No AI providers configured")
            raise ProviderExhaustedError("No AI providers available")

        logger.error(f"All AI providers failed after {attempts} attempts: {last_error}")
        raise ProviderExhaustedError(
            f"All AI providers failed: {last_error}",
            last_error=last_error,
            attempts=attempts,
        )

    async def stream(
        self, request: AIRequest, timeout: float | None = None
    ) -> AsyncIterator[tuple[str, StreamChunk]]:
        """Yield ``(provider, chunk)`` from the first provider that streams to completion.

        A provider failing before its first chunk falls through to the next
        one.  Chunks already yielded cannot be taken back, so a failure after
        that propagates.  *timeout* bounds the wait for each chunk.
        """
        last_error: Exception | None = None
        for name in self.providers_to_try(request.model):
            provider = self._providers[name]
            chunks = provider.stream(self._request_for(name, request)).__aiter__()
            started = False
            try:
                while True:
                    try:
                        if timeout is None:
                            chunk = await chunks.__anext__()
                        else:
                            chunk = await asyncio.wait_for(chunks.__anext__(), timeout=timeout)
                    except StopAsyncIteration:
                        return
                    started = True
                    yield name, chunk
            except asyncio.TimeoutError:
                if started:
                    raise
                last_error = ProviderError(
                    f"{name} did not start streaming within {timeout}s", name, retryable=True
                )
                logger.warning(f"Provider {name} timed out before its first chunk")
            except Exception as e:
                if started:
                    raise
                last_error = e
                logger.warning(f"Provider {name} failed to stream: {e}")

        raise ProviderExhaustedError("No AI providers available for streaming", last_error=last_error)

    # --- Model selection ---

    def select_model(self, task: str, quality: Quality = "high") -> str:
        return _select_model(task, quality, default=self.default_model)

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()


def build_providers(settings: Settings) -> dict[str, BaseProvider]:
    return {
        ProviderName.CLAUDE.value: AnthropicProvider(
            api_key=settings.anthropic_api_key,
            base_url=settings.anthropic_base_url,
            timeout=settings.llm_timeout,
            api_version=settings.anthropic_version,
        ),
        ProviderName.OPENAI.value: OpenAIProvider(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.llm_timeout,
        ),
    }


def build_router(settings: Settings) -> ProviderRouter:
    """Build the router with every provider whose credentials are present."""
    router = ProviderRouter(
        providers=build_providers(settings),
        default_provider=settings.default_provider,
        default_model=settings.default_model,
        fallback_providers=settings.fallback_providers,
        retry_attempts=settings.retry_attempts,
        retry_delay=settings.retry_delay,
    )
    logger.info(f"AI providers available: {router.get_available_providers() or 'none'}")
    return router
