"""Plugin system: capability protocols, tool DTOs, storage and the manager."""

from .base import (
    BasePlugin,
    CommandHandler,
    CommandInfo,
    CommandSource,
    CommandSpec,
    PanelProvider,
    Plugin,
    PluginCapability,
    PluginContext,
    PluginManifest,
    PluginStatus,
    PluginType,
    ToolProvider,
)
from .manager import PluginManager, ToolInfo
from .storage import InMemoryPluginConfigStorage, JsonFilePluginConfigStorage, PluginConfigStorage
from .tools import ToolDefinition, ToolResult

__all__ = [
    "BasePlugin",
    "CommandHandler",
    "CommandInfo",
    "CommandSource",
    "CommandSpec",
    "PanelProvider",
    "Plugin",
    "PluginCapability",
    "PluginContext",
    "PluginManifest",
    "PluginStatus",
    "PluginType",
    "ToolProvider",
    "PluginManager",
    "ToolInfo",
    "InMemoryPluginConfigStorage",
    "JsonFilePluginConfigStorage",
    "PluginConfigStorage",
    "ToolDefinition",
    "ToolResult",
]
