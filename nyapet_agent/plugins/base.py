"""Plugin abstractions.

A plugin declares a :class:`PluginManifest` and lifecycle hooks
(:class:`Plugin`). Capabilities are separate narrow protocols
(:class:`ToolProvider`, :class:`PanelProvider`, :class:`CommandSource`); a
concrete plugin implements any subset and the :class:`PluginManager` checks
``isinstance(obj, Protocol)`` instead of branching on a type tag.

Objects that are not plugins (MCP bridges) can still implement
:class:`ToolProvider` and be registered directly with the manager.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from .tools import ToolDefinition, ToolResult

if TYPE_CHECKING:
    from .manager import PluginManager

CommandHandler = Callable[[str], Union[str, Awaitable[str]]]


class PluginType(str, Enum):
    BACKEND = "backend"
    FRONTEND = "frontend"
    HYBRID = "hybrid"


class PluginStatus(str, Enum):
    LOADED = "loaded"
    ACTIVE = "active"
    ERROR = "error"
    DISABLED = "disabled"


class PluginCapability:
    """Capability identifiers declared in :attr:`PluginManifest.capabilities`."""

    LLM_PROVIDER = "llm_provider"
    TTS_PROVIDER = "tts_provider"
    TOOL = "tool"
    COMMAND = "command"
    PANEL = "panel"


@dataclass
class PluginManifest:
    """Metadata describing a plugin.

    Attributes:
        id: Unique identifier (reverse-domain style, ``builtin.core-commands``).
        name: Display name.
        version: Semantic version string.
        author: Author or maintainer.
        description: Human-readable description.
        type: Backend, frontend or hybrid.
        capabilities: Capability identifiers (see :class:`PluginCapability`).
        dependencies: Plugin ids this plugin expects to be loaded.
        auto_activate: Load on startup.
    """

    id: str
    name: str
    version: str = "1.0.0"
    author: str = ""
    description: str = ""
    type: PluginType = PluginType.BACKEND
    capabilities: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    auto_activate: bool = True


@dataclass
class CommandSpec:
    """A slash-command contributed by a :class:`CommandSource`."""

    name: str
    description: str
    handler: CommandHandler


@dataclass
class CommandInfo:
    """Listing view of a registered command."""

    name: str
    description: str
    source: str
    enabled: bool


@runtime_checkable
class Plugin(Protocol):
    """Lifecycle protocol every plugin implements."""

    manifest: PluginManifest
    enabled: bool

    def on_load(self, context: "PluginContext") -> None:
        ...

    def on_unload(self) -> None:
        ...

    def on_config_changed(self, config: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class ToolProvider(Protocol):
    """Source of callable tools (plugins and MCP bridges)."""

    @property
    def provider_id(self) -> str:
        ...

    @property
    def provider_name(self) -> str:
        ...

    def get_tools(self) -> List[ToolDefinition]:
        ...

    async def execute_tool(self, name: str, arguments: Dict[str, Any]) -> ToolResult:
        ...


@runtime_checkable
class PanelProvider(Protocol):
    """UI panel contributed by a frontend plugin."""

    @property
    def panel_id(self) -> str:
        ...

    @property
    def panel_title(self) -> str:
        ...

    def get_panel_description(self) -> str:
        ...


@runtime_checkable
class CommandSource(Protocol):
    """Plugin contributing slash-commands declaratively."""

    def get_commands(self) -> List[CommandSpec]:
        ...


class PluginContext:
    """Host API handed to a plugin in :meth:`Plugin.on_load`.

    The context is bound to one plugin id: configuration access and command
    registration are attributed to that plugin.
    """

    def __init__(self, manager: "PluginManager", plugin_id: str, services: Optional[Dict[str, Any]] = None) -> None:
        self._manager = manager
        self.plugin_id = plugin_id
        self.services: Dict[str, Any] = dict(services or {})

    @property
    def manager(self) -> "PluginManager":
        return self._manager

    def get_config(self) -> Dict[str, Any]:
        return self._manager.get_plugin_config(self.plugin_id)

    def save_config(self, config: Dict[str, Any]) -> None:
        self._manager.save_plugin_config(self.plugin_id, config)

    def register_command(self, name: str, description: str, handler: CommandHandler) -> None:
        self._manager.register_command(name, description, handler, source=self.plugin_id)

    def unregister_command(self, name: str) -> None:
        self._manager.unregister_command(name)

    def get_plugin(self, plugin_id: str) -> Optional[Plugin]:
        return self._manager.get_plugin(plugin_id)

    def get_plugin_by_name(self, name: str) -> Optional[Plugin]:
        return self._manager.get_plugin_by_name(name)

    def get_all_command_definitions(self) -> List[CommandInfo]:
        return self._manager.get_command_definitions()

    def get_service(self, key: str) -> Any:
        """Return a host service registered under ``key`` (``None`` if absent)."""
        return self.services.get(key)


class BasePlugin:
    """Convenience base with no-op lifecycle hooks.

    Subclasses set ``manifest`` and override the hooks they need.
    """

    manifest: PluginManifest

    def __init__(self) -> None:
        self.enabled = True
        self.context: Optional[PluginContext] = None
        self.config: Dict[str, Any] = {}

    @property
    def status(self) -> PluginStatus:
        return PluginStatus.ACTIVE if self.enabled else PluginStatus.DISABLED

    def on_load(self, context: PluginContext) -> None:
        self.context = context
        self.config = context.get_config()

    def on_unload(self) -> None:
        self.context = None

    def on_config_changed(self, config: Dict[str, Any]) -> None:
        self.config = dict(config)


__all__ = [
    "CommandHandler",
    "PluginType",
    "PluginStatus",
    "PluginCapability",
    "PluginManifest",
    "CommandSpec",
    "CommandInfo",
    "Plugin",
    "ToolProvider",
    "PanelProvider",
    "CommandSource",
    "PluginContext",
    "BasePlugin",
]
