"""Unified runtime error taxonomy public surface.

Re-exports the implementations under ``nyapet_agent.base.errors_parts`` so
callers have one stable import path.
"""

from .errors_parts import (
    AgentError,
    ErrorCode,
    McpDisconnectedError,
    McpError,
    McpProtocolError,
    McpTimeoutError,
    ProviderConfigError,
    UnknownProviderError,
    classify_exception,
)

__all__ = [
    "ErrorCode",
    "AgentError",
    "ProviderConfigError",
    "UnknownProviderError",
    "McpError",
    "McpProtocolError",
    "McpTimeoutError",
    "McpDisconnectedError",
    "classify_exception",
]
