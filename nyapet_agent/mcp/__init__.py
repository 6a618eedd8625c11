"""Model Context Protocol client, tool bridge and server manager."""

from .bridge import McpToolProvider
from .client import McpClient, McpState, resolve_endpoint
from .manager import McpManager
from .models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    McpContentBlock,
    McpServerConfig,
    McpServerStatus,
    McpToolCallResult,
    McpToolDef,
)
from .sse import SseEvent, SseParser

__all__ = [
    "McpToolProvider",
    "McpClient",
    "McpState",
    "resolve_endpoint",
    "McpManager",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "McpContentBlock",
    "McpServerConfig",
    "McpServerStatus",
    "McpToolCallResult",
    "McpToolDef",
    "SseEvent",
    "SseParser",
]
