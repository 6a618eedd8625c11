"""OpenAI ``audio/speech`` text-to-speech provider."""

from __future__ import annotations

import base64
from typing import List

from ...config.defaults import (
    DEFAULT_AUDIO_FORMAT,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_TTS_DEFAULT_MODEL,
    OPENAI_TTS_DEFAULT_VOICE,
)
from ..base import TTSProvider
from ..models import ProviderConfigField, ProviderMetadata, TTSRequest, TTSResponse, VoiceInfo
from ..values import audio_format_to_mime_type

_VOICES = ("alloy", "ash", "coral", "echo", "fable", "onyx", "nova", "sage", "shimmer")

OPENAI_TTS_METADATA = ProviderMetadata(
    id="openai_tts",
    name="OpenAI TTS",
    description="OpenAI text-to-speech (tts-1 / tts-1-hd) and compatible endpoints",
    config_schema=(
        ProviderConfigField(key="api_key", label="API Key", type="password", required=True, placeholder="sk-..."),
        ProviderConfigField(key="base_url", label="API Base URL", default=OPENAI_DEFAULT_BASE_URL),
        ProviderConfigField(
            key="model",
            label="Model",
            type="select",
            default=OPENAI_TTS_DEFAULT_MODEL,
            options=("tts-1", "tts-1-hd", "gpt-4o-mini-tts"),
        ),
        ProviderConfigField(key="voice", label="Voice", type="select", default=OPENAI_TTS_DEFAULT_VOICE, options=_VOICES),
        ProviderConfigField(key="speed", label="Speed", type="number", default="1.0", description="0.25 - 4.0"),
        ProviderConfigField(
            key="format",
            label="Audio format",
            type="select",
            default=DEFAULT_AUDIO_FORMAT,
            options=("mp3", "opus", "aac", "flac", "wav", "pcm"),
        ),
        ProviderConfigField(key="timeout", label="Timeout (seconds)", type="number", default="60"),
        ProviderConfigField(key="proxy", label="Proxy", placeholder="http://127.0.0.1:7890"),
    ),
)


class OpenAITTSProvider(TTSProvider):
    logger_name = "providers.openai_tts"

    def metadata(self) -> ProviderMetadata:
        return OPENAI_TTS_METADATA

    async def synthesize(self, request: TTSRequest) -> TTSResponse:
        """Synthesize ``request.text``; request fields override configured defaults."""
        api_key = self.require_api_key()
        http = await self._ensure_initialized()
        base_url = self.get_config_value("base_url", OPENAI_DEFAULT_BASE_URL).rstrip("/")
        fmt = request.format or self.get_config_value("format", DEFAULT_AUDIO_FORMAT)
        payload = {
            "model": self.get_config_value("model", OPENAI_TTS_DEFAULT_MODEL),
            "input": request.text,
            "voice": request.voice_id or self.get_config_value("voice", OPENAI_TTS_DEFAULT_VOICE),
            "response_format": fmt,
            "speed": request.speed if request.speed is not None else self.get_config_value("speed", 1.0),
        }
        response = await http.post(
            f"{base_url}/audio/speech",
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        self._raise_for_status(response)
        return TTSResponse(
            audio_base64=base64.b64encode(response.content).decode("ascii"),
            mime_type=audio_format_to_mime_type(fmt),
        )

    async def get_voices(self) -> List[VoiceInfo]:
        return [VoiceInfo(id=v, name=v.capitalize()) for v in _VOICES]


__all__ = ["OPENAI_TTS_METADATA", "OpenAITTSProvider"]
