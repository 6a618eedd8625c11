"""Plugin manager: the tool, command and panel registry.

:class:`PluginManager` aggregates callable tools from in-process plugins and
from standalone :class:`ToolProvider` objects (MCP bridges), owns a flat
namespace of slash-commands and persists per-plugin configuration.

Contract:
- Internal maps are replaced whole on every mutation; readers iterating a
  snapshot never observe a partially applied change.
- ``get_all_tools`` returns tools of enabled providers minus the tools turned
  off through the per-name override map. Names are unique in the result; the
  first registered provider wins.
- ``execute_tool`` never raises. Disabled, unknown and failing tools come
  back as ``ToolResult(success=False)``.
- Command ownership is recorded at registration time; unregistering a plugin
  removes every command it owns.
- The configuration document ``{plugin_id: {key: value}}`` is read once in
  the constructor and rewritten in full after each change. A malformed
  document loads as empty.
"""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from ..base.logging import get_logger, log_event
from .base import (
    CommandHandler,
    CommandInfo,
    CommandSource,
    PanelProvider,
    Plugin,
    PluginContext,
    ToolProvider,
)
from .storage import InMemoryPluginConfigStorage, PluginConfigStorage
from .tools import ToolDefinition, ToolResult


@dataclass(frozen=True)
class _Command:
    name: str
    description: str
    handler: CommandHandler
    source: str
    enabled: bool = True


@dataclass(frozen=True)
class ToolInfo:
    """A tool declaration together with the provider exposing it."""

    definition: ToolDefinition
    provider_id: str
    provider_name: str
    enabled: bool


def _normalize_command(name: str) -> str:
    return name.strip().lstrip("/")


class PluginManager:
    """Registry of plugins, tool providers, commands and plugin configuration.

    Args:
        config_storage: Where the plugin configuration document lives. An
            in-memory storage is used when omitted.
        services: Host services exposed to plugins through
            :meth:`PluginContext.get_service`.
    """

    def __init__(
        self,
        config_storage: Optional[PluginConfigStorage] = None,
        services: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.logger = get_logger("plugins.manager")
        self._storage = config_storage if config_storage is not None else InMemoryPluginConfigStorage()
        self._services: Dict[str, Any] = dict(services or {})
        self._plugins: Dict[str, Plugin] = {}
        self._tool_providers: Dict[str, ToolProvider] = {}
        self._tool_overrides: Dict[str, bool] = {}
        self._commands: Dict[str, _Command] = {}
        self._configs: Dict[str, Dict[str, Any]] = self._load_configs()

    # ----- plugins -----
    def register_plugin(self, plugin: Plugin) -> None:
        """Register ``plugin``, call its ``on_load`` hook and collect its capabilities.

        Raises:
            ValueError: If the id is already registered or a dependency is missing.
            RuntimeError: If ``on_load`` fails; the registration is rolled back.
        """
        manifest = plugin.manifest
        if manifest.id in self._plugins:
            raise ValueError(f"Plugin '{manifest.id}' already registered")
        missing = [dep for dep in manifest.dependencies if dep not in self._plugins]
        if missing:
            raise ValueError(f"Plugin '{manifest.id}' missing dependencies: {missing}")

        self._plugins = {**self._plugins, manifest.id: plugin}
        try:
            self._activate(plugin)
        except Exception as exc:
            self._remove_plugin_state(manifest.id)
            log_event(self.logger, "plugin.load_failed", plugin=manifest.id, error=str(exc))
            raise RuntimeError(f"Failed to load plugin '{manifest.id}': {exc}") from exc
        log_event(
            self.logger,
            "plugin.registered",
            plugin=manifest.id,
            version=manifest.version,
            capabilities=list(manifest.capabilities),
        )

    def unregister_plugin(self, plugin_id: str) -> bool:
        plugin = self._plugins.get(plugin_id)
        if plugin is None:
            return False
        try:
            plugin.on_unload()
        except Exception as exc:  # noqa: BLE001 - unload continues
            log_event(self.logger, "plugin.unload_failed", plugin=plugin_id, error=str(exc))
        self._remove_plugin_state(plugin_id)
        log_event(self.logger, "plugin.unregistered", plugin=plugin_id)
        return True

    def set_plugin_enabled(self, plugin_id: str, enabled: bool) -> bool:
        plugin = self._plugins.get(plugin_id)
        if plugin is None:
            return False
        plugin.enabled = enabled
        log_event(self.logger, "plugin.enabled_changed", plugin=plugin_id, enabled=enabled)
        return True

    def reload_plugin(self, plugin_id: str) -> bool:
        """Unload and load ``plugin_id`` again, re-collecting its commands."""
        plugin = self._plugins.get(plugin_id)
        if plugin is None:
            return False
        try:
            plugin.on_unload()
        except Exception as exc:  # noqa: BLE001 - reload continues
            log_event(self.logger, "plugin.unload_failed", plugin=plugin_id, error=str(exc))
        self._drop_commands_of(plugin_id)
        try:
            self._activate(plugin)
        except Exception as exc:  # noqa: BLE001 - reported through the return value
            log_event(self.logger, "plugin.reload_failed", plugin=plugin_id, error=str(exc))
            return False
        log_event(self.logger, "plugin.reloaded", plugin=plugin_id)
        return True

    def _activate(self, plugin: Plugin) -> None:
        plugin_id = plugin.manifest.id
        plugin.on_load(PluginContext(self, plugin_id, self._services))
        if isinstance(plugin, CommandSource):
            for command in plugin.get_commands():
                self.register_command(command.name, command.description, command.handler, source=plugin_id)
        if isinstance(plugin, ToolProvider):
            self._tool_providers = {**self._tool_providers, plugin.provider_id: plugin}

    def _remove_plugin_state(self, plugin_id: str) -> None:
        plugin = self._plugins.get(plugin_id)
        self._plugins = {k: v for k, v in self._plugins.items() if k != plugin_id}
        if plugin is not None:
            self._tool_providers = {k: v for k, v in self._tool_providers.items() if v is not plugin}
        self._drop_commands_of(plugin_id)

    def _drop_commands_of(self, source: str) -> None:
        owned = [name for name, cmd in self._commands.items() if cmd.source == source]
        if owned:
            self._commands = {k: v for k, v in self._commands.items() if v.source != source}
            log_event(self.logger, "command.removed_for_plugin", plugin=source, commands=owned)

    def get_plugin(self, plugin_id: str) -> Optional[Plugin]:
        return self._plugins.get(plugin_id)

    def get_plugin_by_name(self, name: str) -> Optional[Plugin]:
        for plugin in self._plugins.values():
            if plugin.manifest.name == name:
                return plugin
        return None

    def get_plugins_by_capability(self, capability: str) -> List[Plugin]:
        return [p for p in self._plugins.values() if capability in p.manifest.capabilities]

    def get_all_plugins(self) -> List[Plugin]:
        return list(self._plugins.values())

    def get_panels(self) -> List[PanelProvider]:
        """Panels of enabled plugins, in registration order."""
        return [p for p in self._plugins.values() if p.enabled and isinstance(p, PanelProvider)]

    # ----- tool providers -----
    def register_tool_provider(self, provider: ToolProvider) -> None:
        """Register a provider that is not tied to a plugin lifecycle.

        Re-registering an id replaces the previous provider in place.
        """
        self._tool_providers = {**self._tool_providers, provider.provider_id: provider}
        log_event(self.logger, "tool_provider.registered", provider=provider.provider_id)

    def unregister_tool_provider(self, provider_id: str) -> bool:
        if provider_id not in self._tool_providers:
            return False
        self._tool_providers = {k: v for k, v in self._tool_providers.items() if k != provider_id}
        log_event(self.logger, "tool_provider.unregistered", provider=provider_id)
        return True

    def get_tool_providers(self) -> List[ToolProvider]:
        return list(self._tool_providers.values())

    def set_tool_enabled(self, name: str, enabled: bool) -> None:
        self._tool_overrides = {**self._tool_overrides, name: enabled}
        log_event(self.logger, "tool.enabled_changed", tool=name, enabled=enabled)

    def is_tool_enabled(self, name: str) -> bool:
        return self._tool_overrides.get(name, True)

    def _enabled_providers(self) -> List[ToolProvider]:
        return [p for p in self._tool_providers.values() if getattr(p, "enabled", True)]

    def _provider_tools(self, provider: ToolProvider) -> List[ToolDefinition]:
        try:
            return list(provider.get_tools())
        except Exception as exc:  # noqa: BLE001 - a broken provider contributes nothing
            log_event(self.logger, "tool_provider.list_failed", provider=provider.provider_id, error=str(exc))
            return []

    def get_all_tools(self) -> List[ToolDefinition]:
        """Tools callable right now, unique by name (first provider wins)."""
        seen: Dict[str, ToolDefinition] = {}
        for provider in self._enabled_providers():
            for tool in self._provider_tools(provider):
                if tool.name in seen or not self.is_tool_enabled(tool.name):
                    continue
                seen[tool.name] = tool
        return list(seen.values())

    def get_all_tools_with_source(self) -> List[ToolInfo]:
        """Every declaration of every registered provider, for listing.

        Disabled providers and overridden tools are included with
        ``enabled=False``; duplicate names are kept.
        """
        infos: List[ToolInfo] = []
        for provider in self._tool_providers.values():
            provider_enabled = getattr(provider, "enabled", True)
            for tool in self._provider_tools(provider):
                infos.append(
                    ToolInfo(
                        definition=tool,
                        provider_id=provider.provider_id,
                        provider_name=provider.provider_name,
                        enabled=bool(provider_enabled) and self.is_tool_enabled(tool.name),
                    )
                )
        return infos

    def get_tool_schemas(self) -> List[Dict[str, Any]]:
        return [tool.to_schema() for tool in self.get_all_tools()]

    async def execute_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """Run ``name`` on the first enabled provider that exposes it."""
        if not self.is_tool_enabled(name):
            return ToolResult.fail(f"Tool disabled: {name}")
        for provider in self._enabled_providers():
            if not any(tool.name == name for tool in self._provider_tools(provider)):
                continue
            try:
                result = await provider.execute_tool(name, dict(arguments or {}))
            except Exception as exc:  # noqa: BLE001 - converted to a tool error
                log_event(self.logger, "tool.execute_failed", tool=name, provider=provider.provider_id, error=str(exc))
                return ToolResult.fail(str(exc) or type(exc).__name__)
            log_event(self.logger, "tool.executed", tool=name, provider=provider.provider_id, success=result.success)
            return result
        return ToolResult.fail(f"Tool not found: {name}")

    # ----- commands -----
    def register_command(self, name: str, description: str, handler: CommandHandler, source: str = "") -> None:
        key = _normalize_command(name)
        previous = self._commands.get(key)
        if previous is not None and previous.source != source:
            log_event(self.logger, "command.replaced", command=key, old_source=previous.source, new_source=source)
        self._commands = {**self._commands, key: _Command(key, description, handler, source)}
        log_event(self.logger, "command.registered", command=key, source=source)

    def unregister_command(self, name: str) -> bool:
        key = _normalize_command(name)
        if key not in self._commands:
            return False
        self._commands = {k: v for k, v in self._commands.items() if k != key}
        log_event(self.logger, "command.unregistered", command=key)
        return True

    def get_command_handler(self, name: str) -> Optional[CommandHandler]:
        """Handler for ``name``; ``None`` when unknown or disabled."""
        cmd = self._commands.get(_normalize_command(name))
        if cmd is None or not cmd.enabled:
            return None
        return cmd.handler

    def set_command_enabled(self, name: str, enabled: bool) -> bool:
        key = _normalize_command(name)
        cmd = self._commands.get(key)
        if cmd is None:
            return False
        self._commands = {**self._commands, key: replace(cmd, enabled=enabled)}
        log_event(self.logger, "command.enabled_changed", command=key, enabled=enabled)
        return True

    def get_registered_commands(self) -> List[str]:
        return list(self._commands)

    def get_command_definitions(self) -> List[CommandInfo]:
        return [CommandInfo(c.name, c.description, c.source, c.enabled) for c in self._commands.values()]

    async def execute_command(self, text: str) -> Optional[str]:
        """Dispatch ``/name args`` to its handler.

        Returns ``None`` when ``text`` is not a slash-command. Unknown or
        disabled commands and failing handlers produce a message instead of
        raising.
        """
        stripped = text.strip()
        if not stripped.startswith("/") or len(stripped) == 1:
            return None
        name, _, args = stripped[1:].partition(" ")
        handler = self.get_command_handler(name)
        if handler is None:
            return f"Unknown command: /{name}"
        try:
            output = handler(args.strip())
            if inspect.isawaitable(output):
                output = await output
        except Exception as exc:  # noqa: BLE001 - reported to the caller as text
            log_event(self.logger, "command.failed", command=name, error=str(exc))
            return f"Command /{name} failed: {exc}"
        log_event(self.logger, "command.executed", command=name)
        return output

    # ----- plugin configuration -----
    def _load_configs(self) -> Dict[str, Dict[str, Any]]:
        try:
            text = self._storage.load_all()
        except (OSError, UnicodeDecodeError) as exc:
            log_event(self.logger, "plugin_config.malformed", error=str(exc))
            return {}
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log_event(self.logger, "plugin_config.malformed", error=str(exc))
            return {}
        if not isinstance(data, dict):
            log_event(self.logger, "plugin_config.malformed", error=f"expected object, got {type(data).__name__}")
            return {}
        configs: Dict[str, Dict[str, Any]] = {}
        for plugin_id, entry in data.items():
            if isinstance(entry, dict):
                configs[plugin_id] = entry
            else:
                log_event(self.logger, "plugin_config.entry_skipped", plugin=plugin_id)
        return configs

    def _persist(self) -> None:
        self._storage.save_all(json.dumps(self._configs, ensure_ascii=False))

    def get_plugin_config(self, plugin_id: str) -> Dict[str, Any]:
        return dict(self._configs.get(plugin_id, {}))

    def save_plugin_config(self, plugin_id: str, config: Dict[str, Any]) -> None:
        """Store ``config`` for ``plugin_id`` and notify the plugin when loaded."""
        self._configs = {**self._configs, plugin_id: dict(config)}
        self._persist()
        log_event(self.logger, "plugin_config.saved", plugin=plugin_id, keys=sorted(config))
        plugin = self._plugins.get(plugin_id)
        if plugin is not None:
            try:
                plugin.on_config_changed(dict(config))
            except Exception as exc:  # noqa: BLE001 - config is already stored
                log_event(self.logger, "plugin.config_hook_failed", plugin=plugin_id, error=str(exc))

    def has_plugin_data(self, plugin_id: str) -> bool:
        return plugin_id in self._configs

    def clear_plugin_data(self, plugin_id: str) -> None:
        if plugin_id not in self._configs:
            return
        self._configs = {k: v for k, v in self._configs.items() if k != plugin_id}
        self._persist()
        log_event(self.logger, "plugin_config.cleared", plugin=plugin_id)

    def clear_all_plugin_data(self) -> None:
        self._configs = {}
        self._storage.clear_all()
        log_event(self.logger, "plugin_config.cleared_all")


__all__ = ["PluginManager", "ToolInfo"]
