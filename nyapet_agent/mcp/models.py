"""MCP configuration, status and wire models.

Wire models follow the MCP 2024-11-05 JSON-RPC shapes. Field names are
snake_case in Python; the camelCase wire names are accepted as aliases and
produced by ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..config.defaults import JSONRPC_VERSION


class McpServerConfig(BaseModel):
    """Persisted description of one remote MCP server (SSE transport).

    Attributes:
        name: Unique server name; also the connection key.
        url: SSE endpoint, e.g. ``http://localhost:3001/sse``.
        description: Free text.
        auto_start: Connect during :meth:`McpManager.initialize`.
        enabled: Disabled servers are never autostarted.
        headers: Extra headers sent on the stream and on every POST.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    description: str = ""
    auto_start: bool = Field(False, alias="autoStart")
    enabled: bool = True
    headers: Dict[str, str] = Field(default_factory=dict)


class McpServerStatus(BaseModel):
    """Derived connection status of one configured server."""

    name: str
    connected: bool = False
    tool_count: int = 0
    error: Optional[str] = None
    last_connected_at: Optional[float] = None


class JsonRpcError(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: int = 0
    message: str = ""
    data: Any = None


class JsonRpcRequest(BaseModel):
    """Outbound request; ``id`` is ``None`` for notifications."""

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[int] = None
    method: str
    params: Optional[Dict[str, Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JsonRpcResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    jsonrpc: str = JSONRPC_VERSION
    id: Optional[Union[int, str]] = None
    result: Any = None
    error: Optional[JsonRpcError] = None


class McpToolDef(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    description: str = ""
    input_schema: Optional[Dict[str, Any]] = Field(None, alias="inputSchema")


class McpContentBlock(BaseModel):
    """One block of a ``tools/call`` result; only ``text`` blocks are rendered."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str
    text: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")


class McpToolCallResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content: List[McpContentBlock] = Field(default_factory=list)
    is_error: bool = Field(False, alias="isError")

    @classmethod
    def error(cls, message: str) -> "McpToolCallResult":
        return cls(content=[McpContentBlock(type="text", text=message)], is_error=True)

    def text(self) -> str:
        """Text blocks joined with newlines."""
        return "\n".join(block.text for block in self.content if block.type == "text" and block.text is not None)


__all__ = [
    "McpServerConfig",
    "McpServerStatus",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "McpToolDef",
    "McpContentBlock",
    "McpToolCallResult",
]
