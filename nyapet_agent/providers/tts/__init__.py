"""Built-in text-to-speech providers."""

from .elevenlabs import ELEVENLABS_METADATA, ElevenLabsProvider
from .fish_audio import FISH_AUDIO_METADATA, FishAudioProvider
from .openai_tts import OPENAI_TTS_METADATA, OpenAITTSProvider


def register_tts_providers(registry) -> None:
    registry.register(OPENAI_TTS_METADATA, OpenAITTSProvider)
    registry.register(ELEVENLABS_METADATA, ElevenLabsProvider)
    registry.register(FISH_AUDIO_METADATA, FishAudioProvider)


__all__ = [
    "ELEVENLABS_METADATA",
    "ElevenLabsProvider",
    "FISH_AUDIO_METADATA",
    "FishAudioProvider",
    "OPENAI_TTS_METADATA",
    "OpenAITTSProvider",
    "register_tts_providers",
]
