"""
Runtime Base Package

Ambient infrastructure shared by providers, the plugin registry and MCP
clients: structured logging, the error taxonomy, timeout configuration and
the HTTP client builder.
"""

from .errors import (
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
from .http import build_http_client
from .logging import LogContext, configure_logger, get_logger, log_event, normalized_log_event
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    "AgentError",
    "ErrorCode",
    "McpDisconnectedError",
    "McpError",
    "McpProtocolError",
    "McpTimeoutError",
    "ProviderConfigError",
    "UnknownProviderError",
    "classify_exception",
    "build_http_client",
    "LogContext",
    "configure_logger",
    "get_logger",
    "log_event",
    "normalized_log_event",
    "TimeoutConfig",
    "get_timeout_config",
]
