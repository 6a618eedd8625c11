"""MCP manager: server configurations, live connections and tool bridging.

The manager keeps three maps keyed by server name: configs, live clients
and the :class:`McpToolProvider` registered with the plugin manager for each
live client. Statuses are recomputed after every mutation and pushed to
subscribers.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, Iterable, List, Optional

from ..base.errors import AgentError, ErrorCode
from ..base.log_support import LogContext
from ..base.logging import get_logger, log_event
from ..plugins.manager import PluginManager
from .bridge import McpToolProvider
from .client import McpClient
from .models import McpServerConfig, McpServerStatus

ClientFactory = Callable[[McpServerConfig], McpClient]
ConfigsCallback = Callable[[List[McpServerConfig]], None]
StatusListener = Callable[[Dict[str, McpServerStatus]], None]

_logger = get_logger("mcp.manager")


class McpManager:
    """Lifecycle of every configured MCP server.

    Args:
        plugin_manager: Registry receiving one tool provider per live server.
        on_configs_changed: Called with the full config list after add,
            remove and update (the persistence hook).
        client_factory: Builds a client for a config; tests inject fakes.
    """

    def __init__(
        self,
        plugin_manager: PluginManager,
        on_configs_changed: Optional[ConfigsCallback] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._plugins = plugin_manager
        self.on_configs_changed = on_configs_changed
        self._client_factory: ClientFactory = client_factory or McpClient
        self._configs: List[McpServerConfig] = []
        self._clients: Dict[str, McpClient] = {}
        self._providers: Dict[str, McpToolProvider] = {}
        self._failures: Dict[str, str] = {}
        self._statuses: Dict[str, McpServerStatus] = {}
        self._listeners: List[StatusListener] = []
        self._locks: Dict[str, asyncio.Lock] = {}

    # ----- views -----
    @property
    def server_configs(self) -> List[McpServerConfig]:
        return list(self._configs)

    @property
    def server_statuses(self) -> Dict[str, McpServerStatus]:
        return dict(self._statuses)

    def get_config(self, name: str) -> Optional[McpServerConfig]:
        return next((c for c in self._configs if c.name == name), None)

    def get_client(self, name: str) -> Optional[McpClient]:
        return self._clients.get(name)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register ``listener`` for status changes; returns an unsubscribe function."""
        self._listeners = [*self._listeners, listener]

        def unsubscribe() -> None:
            self._listeners = [item for item in self._listeners if item is not listener]

        return unsubscribe

    def _update_statuses(self) -> None:
        statuses: Dict[str, McpServerStatus] = {}
        for config in self._configs:
            client = self._clients.get(config.name)
            if client is not None:
                statuses[config.name] = client.get_status()
            else:
                statuses[config.name] = McpServerStatus(name=config.name, error=self._failures.get(config.name))
        self._statuses = statuses
        for listener in self._listeners:
            try:
                listener(dict(statuses))
            except Exception as exc:  # noqa: BLE001 - one listener must not break the others
                log_event(_logger, "mcp.listener_failed", error=str(exc))

    def _set_configs(self, configs: List[McpServerConfig], *, notify: bool) -> None:
        self._configs = configs
        if notify and self.on_configs_changed is not None:
            self.on_configs_changed(list(configs))
        self._update_statuses()

    # ----- lifecycle -----
    async def initialize(self, configs: Iterable[McpServerConfig]) -> None:
        """Seed the configs and connect every enabled autostart server.

        Connection attempts run concurrently; a failing server is logged and
        does not affect the others.
        """
        self._set_configs(list(configs), notify=False)
        targets = [c.name for c in self._configs if c.auto_start and c.enabled]
        log_event(_logger, "mcp.initialize", servers=len(self._configs), autostart=targets)
        if not targets:
            return
        results = await asyncio.gather(*(self.connect_server(name) for name in targets), return_exceptions=True)
        for name, result in zip(targets, results):
            if isinstance(result, BaseException):
                log_event(_logger, "mcp.autostart_failed", LogContext(server=name), error=str(result))

    async def terminate(self) -> None:
        """Disconnect every server and unregister their tool providers."""
        for name in list(self._clients):
            await self._drop_connection(name)
        self._update_statuses()
        log_event(_logger, "mcp.terminated")

    def _lock(self, name: str) -> asyncio.Lock:
        """Per-server lock serializing connect, removal and update."""
        return self._locks.setdefault(name, asyncio.Lock())

    async def connect_server(self, name: str) -> None:
        """(Re)connect ``name`` and publish its tools.

        Raises:
            AgentError: ``not_found`` when no config has that name.
            McpError: The connect sequence failed.
        """
        async with self._lock(name):
            config = self.get_config(name)
            if config is None:
                raise AgentError(ErrorCode.NOT_FOUND, f"MCP server config not found: {name}", "mcp")
            await self._drop_connection(name)
            client = self._client_factory(config)
            try:
                await client.connect()
            except Exception as exc:
                self._failures[name] = client.error or str(exc)
                await client.close()
                self._update_statuses()
                raise
            self._failures.pop(name, None)
            self._clients[name] = client
            provider = McpToolProvider(name, client)
            self._providers[name] = provider
            self._plugins.register_tool_provider(provider)
            self._update_statuses()
        log_event(_logger, "mcp.server_connected", LogContext(server=name), tools=len(client.tools))

    async def disconnect_server(self, name: str) -> None:
        await self._drop_connection(name)
        self._update_statuses()

    async def _drop_connection(self, name: str) -> None:
        provider = self._providers.pop(name, None)
        if provider is not None:
            self._plugins.unregister_tool_provider(provider.provider_id)
        client = self._clients.pop(name, None)
        if client is not None:
            await client.close()
            log_event(_logger, "mcp.server_disconnected", LogContext(server=name))

    # ----- configuration -----
    def add_server_config(self, config: McpServerConfig) -> None:
        """Insert ``config`` or replace the config with the same name."""
        configs = list(self._configs)
        for index, existing in enumerate(configs):
            if existing.name == config.name:
                configs[index] = config
                break
        else:
            configs.append(config)
        self._set_configs(configs, notify=True)
        log_event(_logger, "mcp.config_saved", LogContext(server=config.name))

    async def remove_server_config(self, name: str) -> None:
        async with self._lock(name):
            await self._drop_connection(name)
            self._failures.pop(name, None)
            self._set_configs([c for c in self._configs if c.name != name], notify=True)
        log_event(_logger, "mcp.config_removed", LogContext(server=name))

    async def update_server_config(self, old_name: str, new_config: McpServerConfig) -> None:
        """Replace the config named ``old_name``; a live connection is dropped.

        The server is not reconnected automatically. When ``old_name`` is
        unknown the config is appended.
        """
        async with self._lock(old_name):
            await self._drop_connection(old_name)
            self._failures.pop(old_name, None)
            configs = list(self._configs)
            for index, existing in enumerate(configs):
                if existing.name == old_name:
                    configs[index] = new_config
                    break
            else:
                configs.append(new_config)
            self._set_configs(configs, notify=True)
        log_event(_logger, "mcp.config_updated", LogContext(server=new_config.name), old_name=old_name)


__all__ = ["McpManager", "ClientFactory", "ConfigsCallback", "StatusListener"]
