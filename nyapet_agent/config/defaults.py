"""nyapet_agent.config.defaults
===========================

Small, stable default values used across the runtime. They can be
overridden through instance configuration or environment variables, but give
sensible fallbacks for local development and tests.

This module intentionally imports nothing from the rest of the package so it
can be used anywhere without circular imports.
"""

from __future__ import annotations

# ---- MCP protocol ----
MCP_PROTOCOL_VERSION = "2024-11-05"
MCP_CLIENT_NAME = "NyaDeskPet"
MCP_CLIENT_VERSION = "1.0.0"
JSONRPC_VERSION = "2.0"
# Provider id prefix used when MCP servers are bridged into the tool registry.
MCP_TOOL_PROVIDER_PREFIX = "mcp."

# ---- Provider defaults ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_DEFAULT_MODEL = "openrouter/auto"
SILICONFLOW_DEFAULT_BASE_URL = "https://api.siliconflow.cn/v1"
SILICONFLOW_DEFAULT_MODEL = "Qwen/Qwen2.5-7B-Instruct"
MOONSHOT_DEFAULT_BASE_URL = "https://api.moonshot.cn/v1"
MOONSHOT_DEFAULT_MODEL = "moonshot-v1-8k"
GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
GEMINI_DEFAULT_MODEL = "gemini-2.5-flash"
DASHSCOPE_DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
DASHSCOPE_DEFAULT_MODEL = "qwen-plus"
ZHIPU_DEFAULT_BASE_URL = "https://open.bigmodel.cn/api/paas/v4"
ZHIPU_DEFAULT_MODEL = "glm-4-flash"
# Volcengine Ark addresses models by endpoint id; there is no usable default.
VOLCENGINE_DEFAULT_BASE_URL = "https://ark.cn-beijing.volces.com/api/v3"
GROQ_DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_DEFAULT_MODEL = "llama-3.3-70b-versatile"
MISTRAL_DEFAULT_BASE_URL = "https://api.mistral.ai/v1"
MISTRAL_DEFAULT_MODEL = "mistral-small-latest"
XAI_DEFAULT_BASE_URL = "https://api.x.ai/v1"
XAI_DEFAULT_MODEL = "grok-3-mini"
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_DEFAULT_MODEL = "claude-3-5-haiku-latest"
ANTHROPIC_API_VERSION = "2023-06-01"
ANTHROPIC_DEFAULT_MAX_TOKENS = 4096

# ---- TTS defaults ----
OPENAI_TTS_DEFAULT_MODEL = "tts-1"
OPENAI_TTS_DEFAULT_VOICE = "alloy"
ELEVENLABS_DEFAULT_BASE_URL = "https://api.elevenlabs.io/v1"
ELEVENLABS_DEFAULT_MODEL = "eleven_multilingual_v2"
ELEVENLABS_DEFAULT_VOICE = "21m00Tcm4TlvDq8ikWAM"
FISH_AUDIO_DEFAULT_BASE_URL = "https://api.fish.audio"
FISH_AUDIO_DEFAULT_MODEL = "s1"
DEFAULT_AUDIO_FORMAT = "mp3"

# ---- Persistence ----
DEFAULT_SETTINGS_FILE = "settings.json"
DEFAULT_PLUGIN_CONFIG_FILE = "plugin_configs.json"
