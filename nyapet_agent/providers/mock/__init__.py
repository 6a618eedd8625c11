"""Offline mock providers."""

from .client import MOCK_LLM_METADATA, MOCK_TTS_METADATA, MockLLMProvider, MockTTSProvider


def register_mock_llm_provider(registry) -> None:
    registry.register(MOCK_LLM_METADATA, MockLLMProvider)


def register_mock_tts_provider(registry) -> None:
    registry.register(MOCK_TTS_METADATA, MockTTSProvider)


__all__ = [
    "MOCK_LLM_METADATA",
    "MOCK_TTS_METADATA",
    "MockLLMProvider",
    "MockTTSProvider",
    "register_mock_llm_provider",
    "register_mock_tts_provider",
]
