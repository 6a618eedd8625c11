"""Agent-side orchestration of LLM tool calls."""

from .tool_calls import (
    DEFAULT_MAX_ITERATIONS,
    MAX_ITERATIONS_TEXT,
    NO_OUTPUT_TEXT,
    ToolLoopResult,
    execute_tool_call,
    execute_tool_calls,
    run_tool_loop,
)

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "MAX_ITERATIONS_TEXT",
    "NO_OUTPUT_TEXT",
    "ToolLoopResult",
    "execute_tool_call",
    "execute_tool_calls",
    "run_tool_loop",
]
