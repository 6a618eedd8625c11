"""Preset OpenAI-compatible providers.

Each preset is an :class:`OpenAIProvider` subclass that only swaps metadata
and the default base URL and model.
"""

from __future__ import annotations

from ...config.defaults import (
    DASHSCOPE_DEFAULT_BASE_URL,
    DASHSCOPE_DEFAULT_MODEL,
    DEEPSEEK_DEFAULT_BASE_URL,
    DEEPSEEK_DEFAULT_MODEL,
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    GROQ_DEFAULT_BASE_URL,
    GROQ_DEFAULT_MODEL,
    MISTRAL_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_MODEL,
    MOONSHOT_DEFAULT_BASE_URL,
    MOONSHOT_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    SILICONFLOW_DEFAULT_BASE_URL,
    SILICONFLOW_DEFAULT_MODEL,
    VOLCENGINE_DEFAULT_BASE_URL,
    XAI_DEFAULT_BASE_URL,
    XAI_DEFAULT_MODEL,
    ZHIPU_DEFAULT_BASE_URL,
    ZHIPU_DEFAULT_MODEL,
)
from ..models import ProviderMetadata
from ..registry import with_capability_fields
from .client import OpenAIProvider
from .helpers import openai_compatible_schema


def _metadata(provider_id: str, name: str, description: str, base_url: str, model: str, **schema_kw) -> ProviderMetadata:
    return with_capability_fields(
        ProviderMetadata(
            id=provider_id,
            name=name,
            description=description,
            config_schema=openai_compatible_schema(base_url=base_url, model=model, **schema_kw),
        )
    )


DEEPSEEK_METADATA = _metadata(
    "deepseek",
    "DeepSeek",
    "DeepSeek chat and reasoning models",
    DEEPSEEK_DEFAULT_BASE_URL,
    DEEPSEEK_DEFAULT_MODEL,
)
OPENROUTER_METADATA = _metadata(
    "openrouter",
    "OpenRouter",
    "Unified gateway to hosted models from many vendors",
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    key_placeholder="sk-or-...",
)
SILICONFLOW_METADATA = _metadata(
    "siliconflow",
    "SiliconFlow",
    "SiliconFlow cloud (Qwen, DeepSeek, GLM...) with function calling",
    SILICONFLOW_DEFAULT_BASE_URL,
    SILICONFLOW_DEFAULT_MODEL,
)
MOONSHOT_METADATA = _metadata(
    "moonshot",
    "Moonshot (Kimi)",
    "Moonshot AI long-context models",
    MOONSHOT_DEFAULT_BASE_URL,
    MOONSHOT_DEFAULT_MODEL,
)
GEMINI_METADATA = _metadata(
    "gemini",
    "Google Gemini",
    "Gemini models through the OpenAI-compatible endpoint; multimodal, function calling, thinking",
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    key_placeholder="AIza...",
)
DASHSCOPE_METADATA = _metadata(
    "dashscope",
    "DashScope (Alibaba Bailian)",
    "Qwen family on Alibaba Cloud Bailian with vision and function calling",
    DASHSCOPE_DEFAULT_BASE_URL,
    DASHSCOPE_DEFAULT_MODEL,
)
ZHIPU_METADATA = _metadata(
    "zhipu",
    "Zhipu AI (GLM)",
    "GLM-4 models; glm-4-flash is free to use",
    ZHIPU_DEFAULT_BASE_URL,
    ZHIPU_DEFAULT_MODEL,
    key_placeholder="your_api_key",
)
VOLCENGINE_METADATA = _metadata(
    "volcengine",
    "Volcengine (Doubao)",
    "Doubao models on Volcengine Ark, addressed by inference endpoint id",
    VOLCENGINE_DEFAULT_BASE_URL,
    "",
    key_placeholder="your_api_key",
    model_label="Endpoint ID",
    model_required=True,
)
GROQ_METADATA = _metadata(
    "groq",
    "Groq",
    "Low-latency LPU inference for open models (Llama, Qwen, Gemma)",
    GROQ_DEFAULT_BASE_URL,
    GROQ_DEFAULT_MODEL,
    key_placeholder="gsk_...",
)
MISTRAL_METADATA = _metadata(
    "mistral",
    "Mistral AI",
    "Mistral Large/Small, Codestral and Pixtral models",
    MISTRAL_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_MODEL,
    key_placeholder="your_api_key",
)
XAI_METADATA = _metadata(
    "xai",
    "xAI (Grok)",
    "Grok models with vision and function calling",
    XAI_DEFAULT_BASE_URL,
    XAI_DEFAULT_MODEL,
    key_placeholder="xai-...",
)


class DeepSeekProvider(OpenAIProvider):
    logger_name = "providers.deepseek"
    default_base_url = DEEPSEEK_DEFAULT_BASE_URL
    default_model = DEEPSEEK_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return DEEPSEEK_METADATA


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter adds attribution headers to every request."""

    logger_name = "providers.openrouter"
    default_base_url = OPENROUTER_DEFAULT_BASE_URL
    default_model = OPENROUTER_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return OPENROUTER_METADATA

    def _headers(self):
        headers = super()._headers()
        headers["HTTP-Referer"] = self.get_config_value("referer", "https://github.com/gameswu/NyaDeskPet")
        headers["X-Title"] = self.get_config_value("app_title", "NyaDeskPet")
        return headers


class SiliconFlowProvider(OpenAIProvider):
    logger_name = "providers.siliconflow"
    default_base_url = SILICONFLOW_DEFAULT_BASE_URL
    default_model = SILICONFLOW_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return SILICONFLOW_METADATA


class MoonshotProvider(OpenAIProvider):
    logger_name = "providers.moonshot"
    default_base_url = MOONSHOT_DEFAULT_BASE_URL
    default_model = MOONSHOT_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return MOONSHOT_METADATA


class GeminiProvider(OpenAIProvider):
    logger_name = "providers.gemini"
    default_base_url = GEMINI_DEFAULT_BASE_URL
    default_model = GEMINI_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return GEMINI_METADATA


class DashScopeProvider(OpenAIProvider):
    logger_name = "providers.dashscope"
    default_base_url = DASHSCOPE_DEFAULT_BASE_URL
    default_model = DASHSCOPE_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return DASHSCOPE_METADATA


class ZhipuProvider(OpenAIProvider):
    logger_name = "providers.zhipu"
    default_base_url = ZHIPU_DEFAULT_BASE_URL
    default_model = ZHIPU_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return ZHIPU_METADATA


class VolcengineProvider(OpenAIProvider):
    """The configured ``model`` is an Ark endpoint id (``ep-...``)."""

    logger_name = "providers.volcengine"
    default_base_url = VOLCENGINE_DEFAULT_BASE_URL
    default_model = ""

    def metadata(self) -> ProviderMetadata:
        return VOLCENGINE_METADATA


class GroqProvider(OpenAIProvider):
    logger_name = "providers.groq"
    default_base_url = GROQ_DEFAULT_BASE_URL
    default_model = GROQ_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return GROQ_METADATA


class MistralProvider(OpenAIProvider):
    logger_name = "providers.mistral"
    default_base_url = MISTRAL_DEFAULT_BASE_URL
    default_model = MISTRAL_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return MISTRAL_METADATA


class XAIProvider(OpenAIProvider):
    logger_name = "providers.xai"
    default_base_url = XAI_DEFAULT_BASE_URL
    default_model = XAI_DEFAULT_MODEL

    def metadata(self) -> ProviderMetadata:
        return XAI_METADATA


PRESETS = (
    (DEEPSEEK_METADATA, DeepSeekProvider),
    (OPENROUTER_METADATA, OpenRouterProvider),
    (SILICONFLOW_METADATA, SiliconFlowProvider),
    (MOONSHOT_METADATA, MoonshotProvider),
    (GEMINI_METADATA, GeminiProvider),
    (DASHSCOPE_METADATA, DashScopeProvider),
    (ZHIPU_METADATA, ZhipuProvider),
    (VOLCENGINE_METADATA, VolcengineProvider),
    (GROQ_METADATA, GroqProvider),
    (MISTRAL_METADATA, MistralProvider),
    (XAI_METADATA, XAIProvider),
)

__all__ = [
    "DeepSeekProvider",
    "OpenRouterProvider",
    "SiliconFlowProvider",
    "MoonshotProvider",
    "GeminiProvider",
    "DashScopeProvider",
    "ZhipuProvider",
    "VolcengineProvider",
    "GroqProvider",
    "MistralProvider",
    "XAIProvider",
    "PRESETS",
]
