"""ElevenLabs text-to-speech provider.

Uses ``POST /text-to-speech/{voice_id}`` with the ``xi-api-key`` header and
``GET /voices`` for discovery (cached per instance). The connectivity check
requires the voice listing to succeed with a valid key.
"""

from __future__ import annotations

import base64
from typing import List

from ...config.defaults import (
    ELEVENLABS_DEFAULT_BASE_URL,
    ELEVENLABS_DEFAULT_MODEL,
    ELEVENLABS_DEFAULT_VOICE,
)
from ..base import TTSProvider
from ..models import ProviderConfigField, ProviderMetadata, TestResult, TTSRequest, TTSResponse, VoiceInfo

_OUTPUT_FORMATS = {
    "mp3": ("mp3_44100_128", "audio/mpeg"),
    "pcm": ("pcm_16000", "audio/pcm"),
    "opus": ("opus_48000_64", "audio/opus"),
}

ELEVENLABS_METADATA = ProviderMetadata(
    id="elevenlabs",
    name="ElevenLabs",
    description="ElevenLabs multilingual voices and voice cloning",
    config_schema=(
        ProviderConfigField(key="api_key", label="API Key", type="password", required=True),
        ProviderConfigField(key="base_url", label="API Base URL", default=ELEVENLABS_DEFAULT_BASE_URL),
        ProviderConfigField(key="voice", label="Voice ID", default=ELEVENLABS_DEFAULT_VOICE),
        ProviderConfigField(
            key="model",
            label="Model",
            type="select",
            default=ELEVENLABS_DEFAULT_MODEL,
            options=("eleven_multilingual_v2", "eleven_turbo_v2_5", "eleven_flash_v2_5"),
        ),
        ProviderConfigField(key="stability", label="Stability", type="number", default="0.5", description="0 - 1"),
        ProviderConfigField(
            key="similarity_boost",
            label="Similarity boost",
            type="number",
            default="0.75",
            description="0 - 1",
        ),
        ProviderConfigField(key="timeout", label="Timeout (seconds)", type="number", default="60"),
        ProviderConfigField(key="proxy", label="Proxy", placeholder="http://127.0.0.1:7890"),
    ),
)


class ElevenLabsProvider(TTSProvider):
    logger_name = "providers.elevenlabs"

    def __init__(self, config, transport=None) -> None:
        super().__init__(config, transport)
        self._cached_voices: List[VoiceInfo] = []

    def metadata(self) -> ProviderMetadata:
        return ELEVENLABS_METADATA

    @property
    def base_url(self) -> str:
        return self.get_config_value("base_url", ELEVENLABS_DEFAULT_BASE_URL).rstrip("/")

    async def synthesize(self, request: TTSRequest) -> TTSResponse:
        api_key = self.require_api_key()
        http = await self._ensure_initialized()
        voice_id = request.voice_id or self.get_config_value("voice", ELEVENLABS_DEFAULT_VOICE)
        output_format, mime_type = _OUTPUT_FORMATS.get(request.format or "mp3", _OUTPUT_FORMATS["mp3"])
        payload = {
            "text": request.text,
            "model_id": self.get_config_value("model", ELEVENLABS_DEFAULT_MODEL),
            "voice_settings": {
                "stability": self.get_config_value("stability", 0.5),
                "similarity_boost": self.get_config_value("similarity_boost", 0.75),
            },
        }
        if request.speed is not None:
            payload["voice_settings"]["speed"] = request.speed
        response = await http.post(
            f"{self.base_url}/text-to-speech/{voice_id}",
            params={"output_format": output_format},
            json=payload,
            headers={"xi-api-key": api_key, "Accept": mime_type},
        )
        self._raise_for_status(response)
        return TTSResponse(audio_base64=base64.b64encode(response.content).decode("ascii"), mime_type=mime_type)

    async def get_voices(self) -> List[VoiceInfo]:
        if self._cached_voices:
            return self._cached_voices
        api_key = self.require_api_key()
        http = await self._ensure_initialized()
        response = await http.get(f"{self.base_url}/voices", headers={"xi-api-key": api_key})
        self._raise_for_status(response)
        voices = []
        for v in response.json().get("voices") or []:
            labels = v.get("labels") or {}
            voices.append(
                VoiceInfo(
                    id=v.get("voice_id", ""),
                    name=v.get("name", ""),
                    description=v.get("description"),
                    preview_url=v.get("preview_url"),
                    language=labels.get("language"),
                )
            )
        self._cached_voices = voices
        return voices

    async def test(self) -> TestResult:
        result = await super().test()
        if result.success and not self._cached_voices:
            return TestResult(success=False, error="No voices available for this API key")
        return result


__all__ = ["ELEVENLABS_METADATA", "ElevenLabsProvider"]
