"""Exposes the tools of one MCP server as a plugin-manager tool provider."""

from __future__ import annotations

from typing import Any, Dict, List

from ..base.logging import get_logger, log_event
from ..config.defaults import MCP_TOOL_PROVIDER_PREFIX
from ..plugins.tools import ToolDefinition, ToolResult
from .client import McpClient

_logger = get_logger("mcp.bridge")


class McpToolProvider:
    """Adapter from :class:`McpClient` to the ``ToolProvider`` protocol.

    Tool definitions map 1:1; the text blocks of a call result are joined
    with newlines and become the tool result (or its error message).
    """

    def __init__(self, server_name: str, client: McpClient) -> None:
        self.server_name = server_name
        self.client = client

    @property
    def provider_id(self) -> str:
        return f"{MCP_TOOL_PROVIDER_PREFIX}{self.server_name}"

    @property
    def provider_name(self) -> str:
        return f"MCP: {self.server_name}"

    def get_tools(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(name=tool.name, description=tool.description, parameters=tool.input_schema)
            for tool in self.client.tools
        ]

    async def execute_tool(self, name: str, arguments: Dict[str, Any]) -> ToolResult:
        try:
            result = await self.client.call_tool(name, arguments)
        except Exception as exc:  # noqa: BLE001 - converted to a tool error
            log_event(_logger, "mcp.bridge_failed", server=self.server_name, tool=name, error=str(exc))
            return ToolResult.fail(f"MCP tool call failed: {exc}")
        text = result.text()
        if result.is_error:
            return ToolResult(success=False, result=text, error=text or "MCP tool reported an error")
        return ToolResult.ok(text)


__all__ = ["McpToolProvider"]
