"""Deterministic offline providers.

Purpose
-------
Implement the LLM and TTS contracts without any network traffic so hosts
and tests can exercise the agent pipeline end to end.

Behavior
--------
- ``MockLLMProvider`` replies with ``extra["reply"]`` when configured, else
  echoes the last user message. When the request offers tools and
  ``extra["tool_call"]`` names one of them, the reply is a tool call with
  ``extra["tool_arguments"]`` (JSON text, default ``{}``) instead, unless the
  last message is already a tool result.
- ``MockTTSProvider`` returns the UTF-8 bytes of the text as "audio".
"""

from __future__ import annotations

import base64
from typing import List

from ...base.logging import LogContext, normalized_log_event
from ..base import LLMProvider, TTSProvider
from ..models import (
    LLMRequest,
    LLMResponse,
    ProviderConfigField,
    ProviderMetadata,
    TokenUsage,
    ToolCallInfo,
    TTSRequest,
    TTSResponse,
    VoiceInfo,
)
from ..registry import with_capability_fields
from ..values import audio_format_to_mime_type

MOCK_MODEL = "mock-model"

MOCK_LLM_METADATA = with_capability_fields(
    ProviderMetadata(
        id="mock",
        name="Mock (offline)",
        description="Deterministic offline provider for development and tests",
        config_schema=(
            ProviderConfigField(key="model", label="Model", default=MOCK_MODEL),
            ProviderConfigField(key="reply", label="Fixed reply", description="Echo the user when empty"),
            ProviderConfigField(key="tool_call", label="Tool to call"),
            ProviderConfigField(key="tool_arguments", label="Tool arguments (JSON)", default="{}"),
        ),
    )
)

MOCK_TTS_METADATA = ProviderMetadata(
    id="mock_tts",
    name="Mock TTS (offline)",
    description="Returns the text bytes as audio payload",
    config_schema=(ProviderConfigField(key="voice", label="Voice", default="mock-voice"),),
)


class MockLLMProvider(LLMProvider):
    logger_name = "providers.mock"

    def metadata(self) -> ProviderMetadata:
        return MOCK_LLM_METADATA

    async def initialize(self) -> None:
        self._initialized = True

    async def chat(self, request: LLMRequest) -> LLMResponse:
        if not self._initialized:
            await self.initialize()
        model = self.resolve_model(request, MOCK_MODEL)
        ctx = LogContext(provider=self.provider_id, model=model)
        normalized_log_event(self._logger, "chat.start", ctx, phase="start", attempt=1, emitted=False)

        last = request.messages[-1] if request.messages else None
        tool_name = self.get_config_value("tool_call", "")
        offered = {t.get("name") for t in request.tools or []}
        if tool_name and tool_name in offered and (last is None or last.role != "tool"):
            call = ToolCallInfo(
                id=f"call_{len(request.messages)}",
                name=tool_name,
                arguments=self.get_config_value("tool_arguments", "{}"),
            )
            normalized_log_event(self._logger, "chat.end", ctx, phase="finalize", attempt=1, emitted=True)
            return LLMResponse(model=model, finish_reason="tool_calls", tool_calls=[call])

        user_text = next((m.content for m in reversed(request.messages) if m.role == "user"), "")
        text = self.get_config_value("reply", "") or user_text
        if last is not None and last.role == "tool" and not self.get_config_value("reply", ""):
            text = last.content
        usage = TokenUsage(len(user_text.split()), len(text.split()), len(user_text.split()) + len(text.split()))
        normalized_log_event(self._logger, "chat.end", ctx, phase="finalize", attempt=1, emitted=bool(text))
        return LLMResponse(text=text, usage=usage, model=model, finish_reason="stop")

    async def get_models(self) -> List[str]:
        return [self.get_config_value("model", MOCK_MODEL)]


class MockTTSProvider(TTSProvider):
    logger_name = "providers.mock_tts"

    def metadata(self) -> ProviderMetadata:
        return MOCK_TTS_METADATA

    async def initialize(self) -> None:
        self._initialized = True

    async def synthesize(self, request: TTSRequest) -> TTSResponse:
        if not self._initialized:
            await self.initialize()
        audio = base64.b64encode(request.text.encode("utf-8")).decode("ascii")
        return TTSResponse(
            audio_base64=audio,
            mime_type=audio_format_to_mime_type(request.format),
            duration_ms=len(request.text) * 60,
        )

    async def get_voices(self) -> List[VoiceInfo]:
        voice = self.get_config_value("voice", "mock-voice")
        return [VoiceInfo(id=voice, name=voice)]


__all__ = [
    "MOCK_MODEL",
    "MOCK_LLM_METADATA",
    "MOCK_TTS_METADATA",
    "MockLLMProvider",
    "MockTTSProvider",
]
