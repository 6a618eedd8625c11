"""TTS providers over a mocked HTTP backend."""

from __future__ import annotations

import base64
import json

import httpx

from nyapet_agent.providers.models import ProviderConfig, TTSRequest
from nyapet_agent.providers.tts import ElevenLabsProvider, FishAudioProvider, OpenAITTSProvider


async def test_openai_tts_request_and_audio():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"RIFF-audio")

    provider = OpenAITTSProvider(
        ProviderConfig(api_key="sk", extra={"voice": "nova", "speed": "1.25"}),
        transport=httpx.MockTransport(handler),
    )
    response = await provider.synthesize(TTSRequest(text="nya", format="wav"))

    assert base64.b64decode(response.audio_base64) == b"RIFF-audio"
    assert response.mime_type == "audio/wav"
    body = json.loads(seen[0].content)
    assert seen[0].url.path == "/v1/audio/speech"
    assert body == {"model": "tts-1", "input": "nya", "voice": "nova", "response_format": "wav", "speed": 1.25}


async def test_openai_tts_voices_and_check():
    provider = OpenAITTSProvider(ProviderConfig(api_key="sk"), transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    voices = await provider.get_voices()
    assert voices[0].id == "alloy"
    assert (await provider.test()).success


async def test_elevenlabs_synthesize():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"\x00\x01")

    provider = ElevenLabsProvider(
        ProviderConfig(api_key="xi", extra={"stability": "0.3"}), transport=httpx.MockTransport(handler)
    )
    response = await provider.synthesize(TTSRequest(text="hello", voice_id="v1", speed=1.1))

    request = seen[0]
    assert request.url.path == "/v1/text-to-speech/v1"
    assert request.url.params["output_format"] == "mp3_44100_128"
    assert request.headers["xi-api-key"] == "xi"
    body = json.loads(request.content)
    assert body["voice_settings"] == {"stability": 0.3, "similarity_boost": 0.75, "speed": 1.1}
    assert response.mime_type == "audio/mpeg"
    assert response.audio_base64 == "AAE="


async def test_elevenlabs_voice_listing_is_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(
            200,
            json={"voices": [{"voice_id": "a", "name": "Aria", "labels": {"language": "en"}}]},
        )

    provider = ElevenLabsProvider(ProviderConfig(api_key="xi"), transport=httpx.MockTransport(handler))
    voices = await provider.get_voices()
    assert [(v.id, v.name, v.language) for v in voices] == [("a", "Aria", "en")]
    assert (await provider.test()).success
    assert len(calls) == 1


async def test_elevenlabs_check_fails_without_voices():
    provider = ElevenLabsProvider(
        ProviderConfig(api_key="xi"), transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"voices": []}))
    )
    result = await provider.test()
    assert not result.success
    assert result.error == "No voices available for this API key"


async def test_elevenlabs_check_reports_http_error():
    provider = ElevenLabsProvider(
        ProviderConfig(api_key="xi"),
        transport=httpx.MockTransport(lambda r: httpx.Response(401, json={"detail": {"message": "invalid key"}})),
    )
    result = await provider.test()
    assert not result.success
    assert "invalid key" in result.error


async def test_fish_audio_synthesize_payload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"RIFF")

    provider = FishAudioProvider(
        ProviderConfig(api_key="fk", extra={"voice": "ref1", "speed": "1.2"}),
        transport=httpx.MockTransport(handler),
    )
    response = await provider.synthesize(TTSRequest(text="nya", format="wav", volume=0.5))

    request = seen[0]
    assert str(request.url) == "https://api.fish.audio/v1/tts"
    assert request.headers["authorization"] == "Bearer fk"
    assert request.headers["model"] == "s1"
    assert json.loads(request.content) == {
        "text": "nya",
        "format": "wav",
        "chunk_length": 200,
        "normalize": True,
        "latency": "normal",
        "temperature": 0.7,
        "top_p": 0.7,
        "reference_id": "ref1",
        "prosody": {"speed": 1.2, "volume": 0.5},
    }
    assert response.mime_type == "audio/wav"
    assert base64.b64decode(response.audio_base64) == b"RIFF"


async def test_fish_audio_voices_merge_own_and_public():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url.params.get("self") == "true":
            return httpx.Response(200, json={"items": [{"_id": "a", "title": "Mine", "languages": ["zh", "en"]}]})
        return httpx.Response(200, json={"items": [{"_id": "a", "title": "Mine"}, {"_id": "b", "title": "Popular"}]})

    provider = FishAudioProvider(ProviderConfig(api_key="fk"), transport=httpx.MockTransport(handler))
    voices = await provider.get_voices()
    await provider.get_voices()

    assert [(v.id, v.name, v.language) for v in voices] == [("a", "Mine (own)", "zh, en"), ("b", "Popular", None)]
    assert calls[1].url.params["sort_by"] == "task_count"
    assert len(calls) == 2


async def test_fish_audio_voices_skip_failed_listing():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("self") == "true":
            return httpx.Response(500)
        return httpx.Response(200, json={"items": [{"_id": "b", "title": "Popular"}]})

    provider = FishAudioProvider(ProviderConfig(api_key="fk"), transport=httpx.MockTransport(handler))
    assert [v.id for v in await provider.get_voices()] == ["b"]


async def test_fish_audio_check_fails_only_on_unauthorized():
    rejected = FishAudioProvider(
        ProviderConfig(api_key="bad"), transport=httpx.MockTransport(lambda r: httpx.Response(401))
    )
    result = await rejected.test()
    assert not result.success and result.error == "Invalid API key"

    accepted = FishAudioProvider(
        ProviderConfig(api_key="fk"), transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"items": []}))
    )
    assert (await accepted.test()).success
