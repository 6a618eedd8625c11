"""Fish Audio text-to-speech provider.

``POST /v1/tts`` with a bearer key and the TTS model in the ``model``
header. Voices are the account's own models followed by the most used
public ones (``GET /model``), merged without duplicates and cached per
instance.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import httpx

from ...base.log_support import LogContext
from ...base.logging import log_event
from ...config.defaults import DEFAULT_AUDIO_FORMAT, FISH_AUDIO_DEFAULT_BASE_URL, FISH_AUDIO_DEFAULT_MODEL
from ..base import TTSProvider
from ..models import ProviderConfigField, ProviderMetadata, TestResult, TTSRequest, TTSResponse, VoiceInfo
from ..values import audio_format_to_mime_type

FISH_AUDIO_METADATA = ProviderMetadata(
    id="fish_audio",
    name="Fish Audio",
    description="Fish Audio speech synthesis with 400+ preset voices and voice cloning",
    config_schema=(
        ProviderConfigField(key="api_key", label="API Key", type="password", required=True),
        ProviderConfigField(key="base_url", label="API Base URL", default=FISH_AUDIO_DEFAULT_BASE_URL),
        ProviderConfigField(
            key="voice",
            label="Voice ID",
            placeholder="802e3bc2b27e49c2995d23ef70e6ac89",
            description="Reference model id; empty uses the default voice",
        ),
        ProviderConfigField(
            key="model",
            label="TTS model",
            type="select",
            default=FISH_AUDIO_DEFAULT_MODEL,
            options=("s1", "speech-1.6", "speech-1.5"),
        ),
        ProviderConfigField(
            key="format",
            label="Audio format",
            type="select",
            default=DEFAULT_AUDIO_FORMAT,
            options=("mp3", "wav", "opus", "pcm"),
        ),
        ProviderConfigField(
            key="latency",
            label="Latency mode",
            type="select",
            default="normal",
            options=("normal", "balanced"),
        ),
        ProviderConfigField(key="speed", label="Speed", type="number", default="1.0", description="0.5 - 2.0"),
        ProviderConfigField(key="timeout", label="Timeout (seconds)", type="number", default="60"),
        ProviderConfigField(key="proxy", label="Proxy", placeholder="http://127.0.0.1:7890"),
    ),
)


class FishAudioProvider(TTSProvider):
    logger_name = "providers.fish_audio"

    def __init__(self, config, transport=None) -> None:
        super().__init__(config, transport)
        self._cached_voices: List[VoiceInfo] = []

    def metadata(self) -> ProviderMetadata:
        return FISH_AUDIO_METADATA

    @property
    def base_url(self) -> str:
        return self.get_config_value("base_url", FISH_AUDIO_DEFAULT_BASE_URL).rstrip("/")

    def _auth(self, api_key: Optional[str]) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def _payload(self, request: TTSRequest, fmt: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "text": request.text,
            "format": fmt,
            "chunk_length": self.get_config_value("chunk_length", 200),
            "normalize": True,
            "latency": self.get_config_value("latency", "normal"),
            "temperature": self.get_config_value("temperature", 0.7),
            "top_p": self.get_config_value("top_p", 0.7),
        }
        voice = request.voice_id or self.get_config_value("voice", "")
        if voice:
            payload["reference_id"] = voice
        speed = request.speed if request.speed is not None else self.get_config_value("speed", None)
        prosody = {k: v for k, v in (("speed", speed), ("volume", request.volume)) if v is not None}
        if prosody:
            payload["prosody"] = prosody
        return payload

    async def synthesize(self, request: TTSRequest) -> TTSResponse:
        api_key = self.require_api_key()
        http = await self._ensure_initialized()
        fmt = request.format or self.get_config_value("format", DEFAULT_AUDIO_FORMAT)
        response = await http.post(
            f"{self.base_url}/v1/tts",
            json=self._payload(request, fmt),
            headers={**self._auth(api_key), "model": self.get_config_value("model", FISH_AUDIO_DEFAULT_MODEL)},
        )
        self._raise_for_status(response)
        return TTSResponse(
            audio_base64=base64.b64encode(response.content).decode("ascii"),
            mime_type=audio_format_to_mime_type(fmt),
        )

    async def _list_models(
        self, http: httpx.AsyncClient, api_key: Optional[str], params: Dict[str, Any]
    ) -> List[dict]:
        response = await http.get(f"{self.base_url}/model", params=params, headers=self._auth(api_key))
        if not response.is_success:
            log_event(
                self._logger,
                "provider.voices_skipped",
                LogContext(provider=self.provider_id),
                status=response.status_code,
            )
            return []
        return response.json().get("items") or []

    async def get_voices(self) -> List[VoiceInfo]:
        if self._cached_voices:
            return self._cached_voices
        api_key = self.api_key()
        http = await self._ensure_initialized()
        own = await self._list_models(
            http, api_key, {"page_size": 100, "page_number": 1, "self": "true", "sort_by": "created_at"}
        )
        public = await self._list_models(http, api_key, {"page_size": 50, "page_number": 1, "sort_by": "task_count"})
        voices: List[VoiceInfo] = []
        seen = set()
        for item, mine in [(m, True) for m in own] + [(m, False) for m in public]:
            voice_id = item.get("_id", "")
            if voice_id in seen:
                continue
            seen.add(voice_id)
            title = item.get("title", "")
            voices.append(
                VoiceInfo(
                    id=voice_id,
                    name=f"{title} (own)" if mine else title,
                    description=item.get("description"),
                    language=", ".join(item.get("languages") or []) or None,
                )
            )
        self._cached_voices = voices
        return voices

    async def test(self) -> TestResult:
        """A 401 on the account's model listing is the only failing answer."""
        try:
            http = await self._ensure_initialized()
            response = await http.get(
                f"{self.base_url}/model",
                params={"page_size": 1, "page_number": 1, "self": "true"},
                headers=self._auth(self.api_key()),
            )
        except httpx.HTTPError as exc:
            return TestResult(success=False, error=str(exc))
        if response.status_code == 401:
            return TestResult(success=False, error="Invalid API key")
        return TestResult(success=True)

    async def terminate(self) -> None:
        self._cached_voices = []
        await super().terminate()


__all__ = ["FISH_AUDIO_METADATA", "FishAudioProvider"]
