"""
Structured runtime error types.

:class:`AgentError` wraps failures from providers, the plugin registry and
MCP servers with a normalized :class:`ErrorCode`. The subclasses pin the code
for the categories the runtime raises itself.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class AgentError(Exception):
    """Structured error with a normalized error code.

    Attributes:
        code: Normalized classification of the failure.
        message: Human-readable message suitable for logs and tool results.
        source: Component the error originated from (provider type id,
            MCP server name, ``"plugins"``...).
        detail: Optional structured payload (for example JSON-RPC error data).
        retryable: Hint for upstream retry logic (not authoritative).
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    source: str = ""
    detail: Optional[Any] = None
    retryable: bool = False
    raw: Optional[BaseException] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        prefix = f"{self.source} " if self.source else ""
        return f"{prefix}{self.code.value}: {self.message}"


class ProviderConfigError(AgentError):
    """A provider cannot operate with its configuration (missing credential...)."""

    def __init__(self, message: str, source: str = "", **kwargs: Any) -> None:
        super().__init__(ErrorCode.INVALID_CONFIG, message, source, **kwargs)


class UnknownProviderError(AgentError):
    """A provider type id is not present in the registry."""

    def __init__(self, message: str, source: str = "", **kwargs: Any) -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, source, **kwargs)


class McpError(AgentError):
    """Transport-level MCP failure (connection refused, HTTP status, stream closed)."""

    def __init__(
        self,
        message: str,
        source: str = "",
        code: ErrorCode = ErrorCode.TRANSIENT,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(code, message, source, **kwargs)


class McpProtocolError(AgentError):
    """Malformed JSON-RPC payload or a JSON-RPC error object in a response.

    ``rpc_code`` holds the JSON-RPC error code when the server sent one.
    """

    def __init__(
        self,
        message: str,
        source: str = "",
        rpc_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(ErrorCode.PROTOCOL, message, source, **kwargs)
        self.rpc_code = rpc_code


class McpTimeoutError(McpError):
    """An endpoint wait or request wait exceeded its deadline."""

    def __init__(self, message: str, source: str = "", **kwargs: Any) -> None:
        super().__init__(message, source, code=ErrorCode.TIMEOUT, **kwargs)


class McpDisconnectedError(McpError):
    """The client was disconnected while a request was outstanding."""

    def __init__(self, message: str = "Disconnected", source: str = "", **kwargs: Any) -> None:
        super().__init__(message, source, code=ErrorCode.DISCONNECTED, **kwargs)


__all__ = [
    "AgentError",
    "ProviderConfigError",
    "UnknownProviderError",
    "McpError",
    "McpProtocolError",
    "McpTimeoutError",
    "McpDisconnectedError",
]
