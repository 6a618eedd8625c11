"""Translation helpers for OpenAI-compatible Chat Completions.

Pure functions only: no I/O. They map the provider-agnostic DTOs to the
``chat/completions`` wire shape and parse responses and SSE stream lines
back. Malformed stream lines are skipped rather than raised so a single bad
chunk never aborts a stream.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from ..models import (
    ChatMessage,
    LLMRequest,
    LLMResponse,
    LLMStreamChunk,
    ProviderConfigField,
    TokenUsage,
    ToolCallDelta,
    ToolCallInfo,
)

DONE_SENTINEL = "[DONE]"


def openai_compatible_schema(
    *,
    base_url: str,
    model: str,
    key_placeholder: str = "sk-...",
    model_label: str = "Model",
    model_required: bool = False,
) -> Tuple[ProviderConfigField, ...]:
    """Config fields shared by every OpenAI-compatible provider type."""
    return (
        ProviderConfigField(
            key="api_key",
            label="API Key",
            type="password",
            required=True,
            placeholder=key_placeholder,
            description="API key",
        ),
        ProviderConfigField(
            key="base_url",
            label="API Base URL",
            default=base_url,
            placeholder=base_url,
            description="Compatible API endpoint",
        ),
        ProviderConfigField(
            key="model",
            label=model_label,
            required=model_required,
            default=model or None,
            placeholder=model or None,
            description="Model identifier",
        ),
        ProviderConfigField(
            key="timeout",
            label="Timeout (seconds)",
            type="number",
            default="60",
            description="Request timeout",
        ),
        ProviderConfigField(
            key="proxy",
            label="Proxy",
            placeholder="http://127.0.0.1:7890",
            description="HTTP/HTTPS proxy",
        ),
        ProviderConfigField(
            key="stream",
            label="Streaming",
            type="boolean",
            default="false",
            description="Stream replies token by token",
        ),
    )


def _image_parts(msg: ChatMessage) -> List[Dict[str, Any]]:
    parts: List[Dict[str, Any]] = []
    if msg.content:
        parts.append({"type": "text", "text": msg.content})
    for img in msg.images or []:
        parts.append({"type": "image_url", "image_url": {"url": f"data:{img.mime_type};base64,{img.data}"}})
    return parts


def convert_messages(messages: List[ChatMessage], system_prompt: Optional[str]) -> List[Dict[str, Any]]:
    """Map chat messages to the ``messages`` array of a Chat Completions call."""
    out: List[Dict[str, Any]] = []
    if system_prompt and system_prompt.strip():
        out.append({"role": "system", "content": system_prompt})
    for msg in messages:
        if msg.role == "tool":
            out.append({"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id})
            continue
        entry: Dict[str, Any] = {"role": msg.role}
        if msg.role == "assistant" and msg.tool_calls:
            entry["content"] = msg.content or None
            entry["tool_calls"] = [
                {"id": tc.id, "type": "function", "function": {"name": tc.name, "arguments": tc.arguments}}
                for tc in msg.tool_calls
            ]
        elif msg.images and msg.role == "user":
            entry["content"] = _image_parts(msg)
        else:
            entry["content"] = msg.content
        if msg.role == "assistant" and msg.reasoning_content is not None:
            entry["reasoning_content"] = msg.reasoning_content
        out.append(entry)
    return out


def convert_tools(tools: Optional[List[Dict[str, Any]]]) -> Optional[List[Dict[str, Any]]]:
    """Wrap ``{name, description, parameters}`` schemas in the function format."""
    if not tools:
        return None
    converted = []
    for tool in tools:
        fn: Dict[str, Any] = {"name": tool["name"], "description": tool.get("description") or ""}
        if tool.get("parameters") is not None:
            fn["parameters"] = tool["parameters"]
        converted.append({"type": "function", "function": fn})
    return converted


def build_chat_payload(request: LLMRequest, model: str, *, stream: bool) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model,
        "messages": convert_messages(request.messages, request.system_prompt),
        "stream": stream,
    }
    if request.temperature is not None:
        payload["temperature"] = request.temperature
    if request.max_tokens is not None:
        payload["max_tokens"] = request.max_tokens
    tools = convert_tools(request.tools)
    if tools:
        payload["tools"] = tools
        if request.tool_choice:
            payload["tool_choice"] = request.tool_choice
    if stream:
        payload["stream_options"] = {"include_usage": True}
    return payload


def parse_usage(data: Optional[Dict[str, Any]]) -> Optional[TokenUsage]:
    if not isinstance(data, dict):
        return None
    return TokenUsage(
        prompt_tokens=int(data.get("prompt_tokens") or 0),
        completion_tokens=int(data.get("completion_tokens") or 0),
        total_tokens=int(data.get("total_tokens") or 0),
    )


def parse_chat_response(data: Dict[str, Any]) -> LLMResponse:
    """Build an :class:`LLMResponse` from a non-streaming completion body."""
    choices = data.get("choices") or []
    choice = choices[0] if choices else {}
    message = choice.get("message") or {}
    tool_calls = [
        ToolCallInfo(
            id=tc.get("id", ""),
            name=(tc.get("function") or {}).get("name", ""),
            arguments=(tc.get("function") or {}).get("arguments") or "{}",
        )
        for tc in message.get("tool_calls") or []
    ]
    return LLMResponse(
        text=message.get("content") or "",
        usage=parse_usage(data.get("usage")),
        model=data.get("model"),
        finish_reason=choice.get("finish_reason"),
        reasoning_content=message.get("reasoning_content"),
        tool_calls=tool_calls or None,
    )


def stream_line_payload(line: str) -> Optional[str]:
    """Return the ``data:`` payload of an SSE line, or ``None`` for other lines."""
    if not line.startswith("data:"):
        return None
    return line[5:].strip()


def parse_stream_chunk(data: str) -> List[LLMStreamChunk]:
    """Translate one SSE ``data`` payload into zero or more chunks.

    A payload carrying ``usage`` yields an extra terminal chunk (``done``).
    Unparsable payloads yield nothing.
    """
    try:
        obj = json.loads(data)
    except ValueError:
        return []
    if not isinstance(obj, dict):
        return []
    chunks: List[LLMStreamChunk] = []
    choices = obj.get("choices") or []
    if choices:
        choice = choices[0] or {}
        delta = choice.get("delta") or {}
        deltas = [
            ToolCallDelta(
                index=int(tc.get("index") or 0),
                id=tc.get("id"),
                name=(tc.get("function") or {}).get("name"),
                arguments=(tc.get("function") or {}).get("arguments"),
            )
            for tc in delta.get("tool_calls") or []
        ]
        chunks.append(
            LLMStreamChunk(
                delta=delta.get("content") or "",
                reasoning_delta=delta.get("reasoning_content"),
                finish_reason=choice.get("finish_reason"),
                tool_call_deltas=deltas or None,
            )
        )
    usage = parse_usage(obj.get("usage"))
    if usage is not None:
        chunks.append(LLMStreamChunk(done=True, usage=usage))
    return chunks


__all__ = [
    "DONE_SENTINEL",
    "openai_compatible_schema",
    "convert_messages",
    "convert_tools",
    "build_chat_payload",
    "parse_usage",
    "parse_chat_response",
    "stream_line_payload",
    "parse_stream_chunk",
]
