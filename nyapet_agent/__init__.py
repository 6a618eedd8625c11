"""nyapet_agent package

Embedded agent runtime of the NyaDeskPet virtual pet.

Purpose:
    Let a host application talk to interchangeable LLM and TTS back ends and
    extend them with tools contributed by in-process plugins or remote MCP
    servers.

Public API (re-exported):
    - Version: ``__version__``
    - Errors: :class:`AgentError`, :class:`ErrorCode` and subclasses
    - Providers: :class:`LLMProvider`, :class:`TTSProvider`,
      :class:`ProviderRegistry`, :class:`ProviderInstanceManager`
    - Plugins: :class:`PluginManager`, :class:`ToolDefinition`,
      :class:`ToolResult`
    - MCP: :class:`McpClient`, :class:`McpManager`, :class:`McpServerConfig`
    - Wiring: :class:`AgentContainer`, :func:`build_container`
"""

from .agent import execute_tool_calls, run_tool_loop
from .base.errors import (
    AgentError,
    ErrorCode,
    McpDisconnectedError,
    McpError,
    McpProtocolError,
    McpTimeoutError,
    ProviderConfigError,
    UnknownProviderError,
)
from .di import AgentContainer, build_container
from .mcp import McpClient, McpManager, McpServerConfig, McpServerStatus
from .plugins import PluginManager, ToolDefinition, ToolResult
from .providers import (
    LLMProvider,
    ProviderInstanceManager,
    ProviderRegistry,
    TTSProvider,
    build_default_llm_registry,
    build_default_tts_registry,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AgentError",
    "ErrorCode",
    "McpDisconnectedError",
    "McpError",
    "McpProtocolError",
    "McpTimeoutError",
    "ProviderConfigError",
    "UnknownProviderError",
    "AgentContainer",
    "build_container",
    "McpClient",
    "McpManager",
    "McpServerConfig",
    "McpServerStatus",
    "PluginManager",
    "ToolDefinition",
    "ToolResult",
    "LLMProvider",
    "ProviderInstanceManager",
    "ProviderRegistry",
    "TTSProvider",
    "build_default_llm_registry",
    "build_default_tts_registry",
    "execute_tool_calls",
    "run_tool_loop",
]
