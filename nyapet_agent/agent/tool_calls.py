"""Execution of LLM tool calls through the plugin manager.

:func:`execute_tool_calls` turns the ``tool_calls`` of one LLM response into
``tool`` messages for the next turn. :func:`run_tool_loop` repeats
chat -> tools -> chat until the model answers without tool calls.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Sequence

from ..base.logging import get_logger, log_event
from ..plugins.manager import PluginManager
from ..plugins.tools import ToolResult
from ..providers.base import LLMProvider
from ..providers.models import ChatMessage, LLMRequest, LLMResponse, ToolCallInfo

logger = get_logger("agent.tool_calls")

NO_OUTPUT_TEXT = "Tool executed successfully (no output)"
DEFAULT_MAX_ITERATIONS = 10
MAX_ITERATIONS_TEXT = "[Warning] Tool calls exceeded max iterations ({limit}), stopped."


def _decode_arguments(raw: str) -> Dict[str, Any]:
    """Parse the JSON argument text of a tool call.

    Empty text means no arguments. Raises ``ValueError`` for invalid JSON or
    a non-object payload.
    """
    if not raw or not raw.strip():
        return {}
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value


async def execute_tool_call(plugin_manager: PluginManager, call: ToolCallInfo) -> ToolResult:
    try:
        arguments = _decode_arguments(call.arguments)
    except ValueError as exc:
        return ToolResult.fail(f"Invalid arguments for {call.name}: {exc}")
    return await plugin_manager.execute_tool(call.name, arguments)


async def execute_tool_calls(plugin_manager: PluginManager, tool_calls: Sequence[ToolCallInfo]) -> List[ChatMessage]:
    """Run ``tool_calls`` in order and return one ``tool`` message per call."""
    log_event(logger, "agent.tool_calls", count=len(tool_calls), tools=[c.name for c in tool_calls])
    messages: List[ChatMessage] = []
    for call in tool_calls:
        result = await execute_tool_call(plugin_manager, call)
        content = result.to_text() if not (result.success and result.result is None) else NO_OUTPUT_TEXT
        messages.append(ChatMessage(role="tool", content=content, tool_call_id=call.id, tool_name=call.name))
        log_event(logger, "agent.tool_call_done", tool=call.name, call_id=call.id, success=result.success)
    return messages


@dataclass
class ToolLoopResult:
    """Final response of a tool loop plus every message it appended."""

    response: LLMResponse
    messages: List[ChatMessage] = field(default_factory=list)
    iterations: int = 0
    exhausted: bool = False


async def run_tool_loop(
    provider: LLMProvider,
    plugin_manager: PluginManager,
    request: LLMRequest,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> ToolLoopResult:
    """Chat with ``provider``, executing requested tools between turns.

    When ``request.tools`` is ``None`` the plugin manager's current tool
    schemas are offered. The assistant tool-call turns and the tool results
    are appended to the conversation and returned in
    :attr:`ToolLoopResult.messages`.

    When the model still requests tools after ``max_iterations`` turns the
    loop stops and the result carries a warning reply with
    :attr:`ToolLoopResult.exhausted` set.
    """
    tools = request.tools if request.tools is not None else plugin_manager.get_tool_schemas()
    history = list(request.messages)
    appended: List[ChatMessage] = []
    model = None
    for iteration in range(1, max_iterations + 1):
        response = await provider.chat(replace(request, messages=history, tools=tools or None))
        model = response.model
        if not response.tool_calls:
            return ToolLoopResult(response=response, messages=appended, iterations=iteration)
        turn = [ChatMessage(role="assistant", content=response.text, tool_calls=list(response.tool_calls))]
        turn.extend(await execute_tool_calls(plugin_manager, response.tool_calls))
        history.extend(turn)
        appended.extend(turn)
    log_event(logger, "agent.tool_loop_exhausted", level=logging.WARNING, max_iterations=max_iterations)
    warning = LLMResponse(
        text=MAX_ITERATIONS_TEXT.format(limit=max_iterations), model=model, finish_reason="max_iterations"
    )
    return ToolLoopResult(response=warning, messages=appended, iterations=max_iterations, exhausted=True)


__all__ = [
    "execute_tool_call",
    "execute_tool_calls",
    "run_tool_loop",
    "ToolLoopResult",
    "NO_OUTPUT_TEXT",
    "DEFAULT_MAX_ITERATIONS",
    "MAX_ITERATIONS_TEXT",
]
