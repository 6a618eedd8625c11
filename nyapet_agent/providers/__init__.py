"""Provider abstraction: models, base classes, registries and instance management.

Concrete adapters live in subpackages (``openai``, ``anthropic``, ``tts``,
``mock``) and are loaded when a default registry is built.
"""

from .base import LLMProvider, TTSProvider
from .instances import ProviderInstanceManager
from .models import (
    ChatImage,
    ChatMessage,
    LLMRequest,
    LLMResponse,
    LLMStreamChunk,
    ProviderConfig,
    ProviderConfigField,
    ProviderInstanceConfig,
    ProviderInstanceInfo,
    ProviderMetadata,
    ProviderStatus,
    TestResult,
    TokenUsage,
    ToolCallDelta,
    ToolCallInfo,
    TTSRequest,
    TTSResponse,
    VoiceInfo,
)
from .registry import (
    PROVIDER_CAPABILITY_FIELDS,
    ProviderRegistry,
    build_default_llm_registry,
    build_default_tts_registry,
)
from .values import audio_format_to_mime_type, get_config_value

__all__ = [
    "LLMProvider",
    "TTSProvider",
    "ProviderInstanceManager",
    "ChatImage",
    "ChatMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMStreamChunk",
    "ProviderConfig",
    "ProviderConfigField",
    "ProviderInstanceConfig",
    "ProviderInstanceInfo",
    "ProviderMetadata",
    "ProviderStatus",
    "TestResult",
    "TokenUsage",
    "ToolCallDelta",
    "ToolCallInfo",
    "TTSRequest",
    "TTSResponse",
    "VoiceInfo",
    "PROVIDER_CAPABILITY_FIELDS",
    "ProviderRegistry",
    "build_default_llm_registry",
    "build_default_tts_registry",
    "audio_format_to_mime_type",
    "get_config_value",
]
