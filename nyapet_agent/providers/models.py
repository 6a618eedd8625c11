"""
Provider data model.

Two families live here:

* Persisted configuration (pydantic v2): :class:`ProviderConfig`,
  :class:`ProviderInstanceConfig` and the immutable type descriptors
  :class:`ProviderMetadata` / :class:`ProviderConfigField`. These are stored
  inside the application settings and validated on load.
* Runtime request/response DTOs (dataclasses): chat messages, tool calls,
  LLM and TTS requests/responses and the connectivity :class:`TestResult`.
  They are provider-agnostic; each adapter maps them to its own wire format.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ConfigFieldType = Literal["string", "password", "number", "select", "boolean"]


# ---------------------------------------------------------------------------
# Persisted configuration


class ProviderConfigField(BaseModel):
    """One configurable setting of a provider type (drives the settings form)."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    type: ConfigFieldType = "string"
    required: bool = False
    default: Optional[str] = None
    placeholder: Optional[str] = None
    options: Optional[Tuple[str, ...]] = None
    description: Optional[str] = None


class ProviderMetadata(BaseModel):
    """Static description of a provider *type* (not an instance)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    config_schema: Tuple[ProviderConfigField, ...] = ()

    def get_field(self, key: str) -> Optional[ProviderConfigField]:
        """Return the declared field for ``key`` or ``None``."""
        return next((f for f in self.config_schema if f.key == key), None)


class ProviderConfig(BaseModel):
    """Connection parameters of one provider instance.

    Attributes:
        id: Instance-scoped identifier.
        name: Display name.
        api_key: Vendor credential.
        base_url: API base URL override.
        model: Default model name.
        timeout: Request timeout in seconds.
        proxy: Proxy URL (``http://host:port``).
        extra: Vendor-specific flags (``stream``, ``voice``, capability
            switches...). Values are usually strings and are coerced on read.
    """

    id: str = ""
    name: str = ""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    timeout: Optional[int] = None
    proxy: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class ProviderInstanceConfig(BaseModel):
    """A named, persisted binding of a :class:`ProviderConfig` to a provider type."""

    instance_id: str = Field(..., min_length=1)
    provider_id: str = Field(..., min_length=1)
    display_name: str = ""
    config: ProviderConfig = Field(default_factory=ProviderConfig)
    enabled: bool = False


class ProviderStatus(str, Enum):
    """Runtime status of a provider instance."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class ProviderInstanceInfo:
    """Derived view of one provider instance for listing."""

    instance_id: str
    provider_id: str
    display_name: str
    config: ProviderConfig
    metadata: Optional[ProviderMetadata]
    enabled: bool
    status: ProviderStatus
    error: Optional[str] = None
    is_primary: bool = False


@dataclass
class TestResult:
    """Outcome of a connectivity check or instance (re)initialization."""

    __test__ = False  # not a pytest test class

    success: bool
    error: Optional[str] = None
    model: Optional[str] = None


# ---------------------------------------------------------------------------
# LLM request / response


@dataclass
class ToolCallInfo:
    """A complete tool call requested by the model (arguments as JSON text)."""

    id: str
    name: str
    arguments: str


@dataclass
class ToolCallDelta:
    """An incremental fragment of a tool call during streaming."""

    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: Optional[str] = None


@dataclass
class ChatImage:
    """Inline image attached to a user message (base64 data)."""

    data: str
    mime_type: str = "image/png"


@dataclass
class ChatMessage:
    """One message of a conversation.

    ``role`` is ``system``, ``user``, ``assistant`` or ``tool``. Assistant
    messages may carry ``tool_calls``; tool messages carry the id and name of
    the call they answer.
    """

    role: str
    content: str = ""
    reasoning_content: Optional[str] = None
    tool_calls: Optional[List[ToolCallInfo]] = None
    tool_call_id: Optional[str] = None
    tool_name: Optional[str] = None
    images: Optional[List[ChatImage]] = None


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class LLMRequest:
    """Provider-agnostic chat request.

    ``tools`` holds provider-agnostic schemas ``{name, description,
    parameters}``; adapters translate them to the vendor's function format.
    ``tool_choice`` is ``none``, ``auto`` or ``required``.
    """

    messages: List[ChatMessage]
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    session_id: Optional[str] = None
    model: Optional[str] = None
    tools: Optional[List[Dict[str, Any]]] = None
    tool_choice: Optional[str] = None


@dataclass
class LLMResponse:
    text: str = ""
    usage: Optional[TokenUsage] = None
    model: Optional[str] = None
    finish_reason: Optional[str] = None
    reasoning_content: Optional[str] = None
    tool_calls: Optional[List[ToolCallInfo]] = None


@dataclass
class LLMStreamChunk:
    """One incremental streaming event; ``done`` marks the terminal chunk."""

    delta: str = ""
    done: bool = False
    usage: Optional[TokenUsage] = None
    reasoning_delta: Optional[str] = None
    finish_reason: Optional[str] = None
    tool_call_deltas: Optional[List[ToolCallDelta]] = None


# ---------------------------------------------------------------------------
# TTS request / response


@dataclass
class TTSRequest:
    text: str
    voice_id: Optional[str] = None
    format: Optional[str] = "mp3"
    speed: Optional[float] = None
    volume: Optional[float] = None


@dataclass
class TTSResponse:
    """Synthesized audio (base64) with its MIME type."""

    audio_base64: str
    mime_type: str = "audio/mpeg"
    duration_ms: Optional[int] = None


@dataclass
class VoiceInfo:
    id: str
    name: str
    description: Optional[str] = None
    preview_url: Optional[str] = None
    language: Optional[str] = None


__all__ = [
    "ConfigFieldType",
    "ProviderConfigField",
    "ProviderMetadata",
    "ProviderConfig",
    "ProviderInstanceConfig",
    "ProviderStatus",
    "ProviderInstanceInfo",
    "TestResult",
    "ToolCallInfo",
    "ToolCallDelta",
    "ChatImage",
    "ChatMessage",
    "TokenUsage",
    "LLMRequest",
    "LLMResponse",
    "LLMStreamChunk",
    "TTSRequest",
    "TTSResponse",
    "VoiceInfo",
]
