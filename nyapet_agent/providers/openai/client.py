"""OpenAI-compatible chat provider (``chat/completions`` over ``httpx``).

Summary:
- Non-stream chat via a single POST; non-2xx responses raise
  :class:`AgentError` classified from the status code.
- Native streaming via SSE (``stream: true``); ``data: [DONE]`` or a chunk
  carrying ``usage`` terminates the stream with a ``done`` chunk.
- ``get_models`` lists ``GET /models`` and caches the sorted ids.

Compatible back ends (DeepSeek, OpenRouter, SiliconFlow, Moonshot...) reuse
this class through :mod:`.presets`, overriding only metadata and defaults.
"""

from __future__ import annotations

from typing import AsyncIterator, Dict, List, Optional

import httpx

from ...base.logging import LogContext, normalized_log_event
from ...config.defaults import OPENAI_DEFAULT_BASE_URL, OPENAI_DEFAULT_MODEL
from ..base import LLMProvider
from ..models import LLMRequest, LLMResponse, LLMStreamChunk, ProviderConfig, ProviderMetadata
from ..registry import with_capability_fields
from .helpers import (
    DONE_SENTINEL,
    build_chat_payload,
    openai_compatible_schema,
    parse_chat_response,
    parse_stream_chunk,
    stream_line_payload,
)

OPENAI_METADATA = with_capability_fields(
    ProviderMetadata(
        id="openai",
        name="OpenAI / compatible API",
        description="OpenAI API and every compatible endpoint (DeepSeek, Moonshot, Groq, local servers...)",
        config_schema=openai_compatible_schema(base_url=OPENAI_DEFAULT_BASE_URL, model=OPENAI_DEFAULT_MODEL),
    )
)


class OpenAIProvider(LLMProvider):
    """Chat provider speaking the OpenAI Chat Completions protocol.

    Parameters:
        config: Instance configuration. ``base_url`` and ``model`` fall back
            to the class defaults.
        transport: Optional ``httpx`` transport (tests).
    """

    logger_name = "providers.openai"
    default_base_url = OPENAI_DEFAULT_BASE_URL
    default_model = OPENAI_DEFAULT_MODEL

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__(config, transport)
        self._model = config.model or self.default_model
        self._cached_models: List[str] = []

    def metadata(self) -> ProviderMetadata:
        return OPENAI_METADATA

    @property
    def base_url(self) -> str:
        return self.get_config_value("base_url", self.default_base_url).rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.require_api_key()}", "Content-Type": "application/json"}

    async def chat(self, request: LLMRequest) -> LLMResponse:
        """Run one non-streaming completion.

        Raises:
            ProviderConfigError: no API key is configured.
            AgentError: the API answered with a non-2xx status.
        """
        headers = self._headers()
        model = self.resolve_model(request, self.default_model)
        http = await self._ensure_initialized()
        ctx = LogContext(provider=self.provider_id, model=model)
        normalized_log_event(self._logger, "chat.start", ctx, phase="start", attempt=1, emitted=False)
        response = await http.post(
            f"{self.base_url}/chat/completions",
            json=build_chat_payload(request, model, stream=False),
            headers=headers,
        )
        self._raise_for_status(response)
        result = parse_chat_response(response.json())
        normalized_log_event(
            self._logger,
            "chat.end",
            ctx,
            phase="finalize",
            attempt=1,
            emitted=bool(result.text or result.tool_calls),
            finish_reason=result.finish_reason,
        )
        return result

    async def chat_stream(self, request: LLMRequest) -> AsyncIterator[LLMStreamChunk]:
        """Stream a completion as incremental chunks ending with ``done=True``."""
        headers = self._headers()
        model = self.resolve_model(request, self.default_model)
        http = await self._ensure_initialized()
        ctx = LogContext(provider=self.provider_id, model=model)
        emitted = 0
        async with http.stream(
            "POST",
            f"{self.base_url}/chat/completions",
            json=build_chat_payload(request, model, stream=True),
            headers=headers,
        ) as response:
            if not response.is_success:
                await response.aread()
                self._raise_for_status(response)
            async for line in response.aiter_lines():
                data = stream_line_payload(line)
                if data is None:
                    continue
                if data == DONE_SENTINEL:
                    break
                for chunk in parse_stream_chunk(data):
                    emitted += 1
                    yield chunk
                    if chunk.done:
                        normalized_log_event(
                            self._logger, "stream.end", ctx, phase="finalize", attempt=1, emitted=True, chunks=emitted
                        )
                        return
        normalized_log_event(
            self._logger, "stream.end", ctx, phase="finalize", attempt=1, emitted=emitted > 0, chunks=emitted
        )
        yield LLMStreamChunk(done=True)

    async def get_models(self) -> List[str]:
        if self._cached_models:
            return self._cached_models
        headers = self._headers()
        http = await self._ensure_initialized()
        response = await http.get(f"{self.base_url}/models", headers=headers)
        self._raise_for_status(response)
        data = response.json().get("data") or []
        self._cached_models = sorted(str(m.get("id")) for m in data if isinstance(m, dict) and m.get("id"))
        return self._cached_models


__all__ = ["OPENAI_METADATA", "OpenAIProvider"]
