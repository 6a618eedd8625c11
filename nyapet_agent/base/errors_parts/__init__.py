"""Errors parts package public surface.

Prefer importing from ``nyapet_agent.base.errors`` for the stable surface.
"""

from .error_code import ErrorCode
from .agent_error import (
    AgentError,
    McpDisconnectedError,
    McpError,
    McpProtocolError,
    McpTimeoutError,
    ProviderConfigError,
    UnknownProviderError,
)
from .classification import classify_exception

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
