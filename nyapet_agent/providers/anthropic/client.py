"""Anthropic Messages API provider.

Differences from the OpenAI-compatible family handled here:
- ``x-api-key`` + ``anthropic-version`` headers instead of a bearer token.
- The system prompt is a top-level field; only ``user``/``assistant`` roles
  exist, tool results travel as ``tool_result`` blocks inside user turns.
- Responses are content-block arrays (``text`` / ``tool_use``) with a
  ``stop_reason`` that is normalized to the OpenAI vocabulary.

Streaming uses the inherited two-event fallback of :class:`LLMProvider`.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ...base.logging import LogContext, normalized_log_event
from ...config.defaults import (
    ANTHROPIC_API_VERSION,
    ANTHROPIC_DEFAULT_BASE_URL,
    ANTHROPIC_DEFAULT_MAX_TOKENS,
    ANTHROPIC_DEFAULT_MODEL,
)
from ..base import LLMProvider
from ..models import (
    ChatMessage,
    LLMRequest,
    LLMResponse,
    ProviderConfigField,
    ProviderMetadata,
    TokenUsage,
    ToolCallInfo,
)
from ..registry import with_capability_fields

ANTHROPIC_METADATA = with_capability_fields(
    ProviderMetadata(
        id="anthropic",
        name="Anthropic (Claude)",
        description="Anthropic Messages API with vision and tool use",
        config_schema=(
            ProviderConfigField(key="api_key", label="API Key", type="password", required=True, placeholder="sk-ant-..."),
            ProviderConfigField(key="base_url", label="API Base URL", default=ANTHROPIC_DEFAULT_BASE_URL),
            ProviderConfigField(
                key="model",
                label="Model",
                default=ANTHROPIC_DEFAULT_MODEL,
                placeholder=ANTHROPIC_DEFAULT_MODEL,
            ),
            ProviderConfigField(key="timeout", label="Timeout (seconds)", type="number", default="120"),
            ProviderConfigField(key="proxy", label="Proxy", placeholder="http://127.0.0.1:7890"),
            ProviderConfigField(
                key="max_tokens",
                label="Max output tokens",
                type="number",
                default=str(ANTHROPIC_DEFAULT_MAX_TOKENS),
            ),
        ),
    )
)

_STOP_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "tool_use": "tool_calls",
    "max_tokens": "length",
}


def _tool_input(arguments: str) -> Dict[str, Any]:
    try:
        value = json.loads(arguments or "{}")
    except ValueError:
        return {"raw": arguments}
    return value if isinstance(value, dict) else {"raw": arguments}


def convert_messages(messages: List[ChatMessage]) -> List[Dict[str, Any]]:
    """Map chat messages to Anthropic turns.

    Consecutive tool results are merged into one user turn.
    """
    out: List[Dict[str, Any]] = []
    for msg in messages:
        if msg.role == "system":
            continue
        if msg.role == "tool":
            block = {"type": "tool_result", "tool_use_id": msg.tool_call_id or "", "content": msg.content}
            last = out[-1] if out else None
            if last and last["role"] == "user" and isinstance(last["content"], list):
                last["content"] = last["content"] + [block]
            else:
                out.append({"role": "user", "content": [block]})
            continue
        if msg.role == "assistant":
            blocks: List[Dict[str, Any]] = []
            if msg.content:
                blocks.append({"type": "text", "text": msg.content})
            for tc in msg.tool_calls or []:
                blocks.append({"type": "tool_use", "id": tc.id, "name": tc.name, "input": _tool_input(tc.arguments)})
            out.append({"role": "assistant", "content": blocks or msg.content})
            continue
        if msg.images:
            content: List[Dict[str, Any]] = [
                {"type": "image", "source": {"type": "base64", "media_type": img.mime_type, "data": img.data}}
                for img in msg.images
            ]
            content.append({"type": "text", "text": msg.content})
            out.append({"role": "user", "content": content})
        else:
            out.append({"role": "user", "content": msg.content})
    return out


def convert_tools(tools: Optional[List[Dict[str, Any]]]) -> Optional[List[Dict[str, Any]]]:
    if not tools:
        return None
    return [
        {
            "name": t["name"],
            "description": t.get("description") or "",
            "input_schema": t.get("parameters") or {"type": "object", "properties": {}},
        }
        for t in tools
    ]


def convert_tool_choice(choice: Optional[str]) -> Optional[Dict[str, str]]:
    if choice == "none":
        return None
    if choice == "required":
        return {"type": "any"}
    return {"type": "auto"}


def parse_response(data: Dict[str, Any]) -> LLMResponse:
    texts: List[str] = []
    calls: List[ToolCallInfo] = []
    for block in data.get("content") or []:
        kind = block.get("type")
        if kind == "text" and block.get("text"):
            texts.append(block["text"])
        elif kind == "tool_use" and block.get("id") and block.get("name"):
            calls.append(ToolCallInfo(id=block["id"], name=block["name"], arguments=json.dumps(block.get("input") or {})))
    usage = data.get("usage") or {}
    prompt = int(usage.get("input_tokens") or 0)
    completion = int(usage.get("output_tokens") or 0)
    stop = data.get("stop_reason")
    return LLMResponse(
        text="".join(texts),
        usage=TokenUsage(prompt, completion, prompt + completion) if usage else None,
        model=data.get("model"),
        finish_reason=_STOP_REASONS.get(stop, stop),
        tool_calls=calls or None,
    )


class AnthropicProvider(LLMProvider):
    logger_name = "providers.anthropic"

    def metadata(self) -> ProviderMetadata:
        return ANTHROPIC_METADATA

    @property
    def base_url(self) -> str:
        return self.get_config_value("base_url", ANTHROPIC_DEFAULT_BASE_URL).rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.require_api_key(),
            "anthropic-version": ANTHROPIC_API_VERSION,
            "content-type": "application/json",
        }

    def build_payload(self, request: LLMRequest, model: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": convert_messages(request.messages),
            "max_tokens": request.max_tokens or self.get_config_value("max_tokens", ANTHROPIC_DEFAULT_MAX_TOKENS),
        }
        if request.system_prompt:
            payload["system"] = request.system_prompt
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        tools = convert_tools(request.tools)
        choice = convert_tool_choice(request.tool_choice)
        # "none" is expressed by omitting tools altogether
        if tools and choice is not None:
            payload["tools"] = tools
            payload["tool_choice"] = choice
        return payload

    async def chat(self, request: LLMRequest) -> LLMResponse:
        headers = self._headers()
        model = self.resolve_model(request, ANTHROPIC_DEFAULT_MODEL)
        http = await self._ensure_initialized()
        ctx = LogContext(provider=self.provider_id, model=model)
        normalized_log_event(self._logger, "chat.start", ctx, phase="start", attempt=1, emitted=False)
        response = await http.post(f"{self.base_url}/messages", json=self.build_payload(request, model), headers=headers)
        self._raise_for_status(response)
        result = parse_response(response.json())
        normalized_log_event(
            self._logger, "chat.end", ctx, phase="finalize", attempt=1, emitted=bool(result.text or result.tool_calls)
        )
        return result

    async def get_models(self) -> List[str]:
        headers = self._headers()
        http = await self._ensure_initialized()
        response = await http.get(f"{self.base_url}/models", headers=headers)
        self._raise_for_status(response)
        return [str(m["id"]) for m in response.json().get("data") or [] if isinstance(m, dict) and m.get("id")]


__all__ = ["ANTHROPIC_METADATA", "AnthropicProvider"]
