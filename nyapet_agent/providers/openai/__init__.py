"""OpenAI-compatible chat providers (OpenAI plus preset back ends)."""

from .client import OPENAI_METADATA, OpenAIProvider
from .presets import (
    PRESETS,
    DashScopeProvider,
    DeepSeekProvider,
    GeminiProvider,
    GroqProvider,
    MistralProvider,
    MoonshotProvider,
    OpenRouterProvider,
    SiliconFlowProvider,
    VolcengineProvider,
    XAIProvider,
    ZhipuProvider,
)


def register_openai_providers(registry) -> None:
    """Register ``openai`` followed by every preset in ``registry``."""
    registry.register(OPENAI_METADATA, OpenAIProvider)
    for metadata, cls in PRESETS:
        registry.register(metadata, cls)


__all__ = [
    "OPENAI_METADATA",
    "OpenAIProvider",
    "DashScopeProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "GroqProvider",
    "MistralProvider",
    "MoonshotProvider",
    "OpenRouterProvider",
    "SiliconFlowProvider",
    "VolcengineProvider",
    "XAIProvider",
    "ZhipuProvider",
    "register_openai_providers",
]
