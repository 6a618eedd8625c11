"""Composition root for the agent runtime.

:class:`AgentContainer` wires the provider registries, the two provider
instance managers, the plugin manager and the MCP manager, and binds their
persistence callbacks to one :class:`SettingsRepository`. Nothing here is a
module-level singleton; hosts create one container per runtime.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from ..base.logging import get_logger, log_event
from ..config.defaults import DEFAULT_PLUGIN_CONFIG_FILE, DEFAULT_SETTINGS_FILE
from ..config.settings import FileSettingsStorage, SettingsRepository
from ..mcp.manager import ClientFactory, McpManager
from ..mcp.models import McpServerConfig
from ..plugins.base import Plugin
from ..plugins.builtin import LLM_INSTANCES_SERVICE, CoreCommandsPlugin
from ..plugins.manager import PluginManager
from ..plugins.storage import JsonFilePluginConfigStorage, PluginConfigStorage
from ..providers.base import LLMProvider, TTSProvider
from ..providers.instances import ProviderInstanceManager
from ..providers.models import ProviderInstanceConfig
from ..providers.registry import ProviderRegistry, build_default_llm_registry, build_default_tts_registry

TTS_INSTANCES_SERVICE = "tts_instances"


class AgentContainer:
    """Owns every long-lived runtime component.

    Args:
        settings_repo: Source and sink of the persisted settings.
        plugin_storage: Storage of the plugin configuration document.
        llm_registry: LLM provider registry (built-ins when omitted).
        tts_registry: TTS provider registry (built-ins when omitted).
        mcp_client_factory: Optional MCP client factory (tests inject fakes).
        builtin_plugins: Register :class:`CoreCommandsPlugin` on start.
    """

    def __init__(
        self,
        settings_repo: SettingsRepository,
        plugin_storage: Optional[PluginConfigStorage] = None,
        *,
        llm_registry: Optional[ProviderRegistry[LLMProvider]] = None,
        tts_registry: Optional[ProviderRegistry[TTSProvider]] = None,
        mcp_client_factory: Optional[ClientFactory] = None,
        builtin_plugins: bool = True,
    ) -> None:
        self.logger = get_logger("di.container")
        self.settings_repo = settings_repo
        self.llm_registry = llm_registry or build_default_llm_registry()
        self.tts_registry = tts_registry or build_default_tts_registry()
        self.llm_instances: ProviderInstanceManager[LLMProvider] = ProviderInstanceManager(
            self.llm_registry, persist=self._persist_llm, kind="llm"
        )
        self.tts_instances: ProviderInstanceManager[TTSProvider] = ProviderInstanceManager(
            self.tts_registry, persist=self._persist_tts, kind="tts"
        )
        self.plugin_manager = PluginManager(
            plugin_storage,
            services={LLM_INSTANCES_SERVICE: self.llm_instances, TTS_INSTANCES_SERVICE: self.tts_instances},
        )
        self.mcp_manager = McpManager(
            self.plugin_manager,
            on_configs_changed=self._persist_mcp,
            client_factory=mcp_client_factory,
        )
        self._builtin_plugins = builtin_plugins
        self._started = False

    # ----- persistence hooks -----
    def _persist_llm(self, configs: List[ProviderInstanceConfig], primary_id: Optional[str]) -> None:
        self.settings_repo.update(
            lambda s: s.model_copy(update={"llm_provider_instances": configs, "primary_llm_instance_id": primary_id})
        )

    def _persist_tts(self, configs: List[ProviderInstanceConfig], primary_id: Optional[str]) -> None:
        self.settings_repo.update(
            lambda s: s.model_copy(update={"tts_provider_instances": configs, "primary_tts_instance_id": primary_id})
        )

    def _persist_mcp(self, configs: List[McpServerConfig]) -> None:
        self.settings_repo.update(lambda s: s.model_copy(update={"mcp_servers": configs}))

    # ----- lifecycle -----
    @property
    def started(self) -> bool:
        return self._started

    def register_plugin(self, plugin: Plugin) -> None:
        self.plugin_manager.register_plugin(plugin)

    async def start(self) -> None:
        """Load settings, restore provider instances and autostart MCP servers."""
        if self._started:
            return
        settings = self.settings_repo.load()
        self.llm_instances.load(settings.llm_provider_instances, settings.primary_llm_instance_id)
        self.tts_instances.load(settings.tts_provider_instances, settings.primary_tts_instance_id)
        if self._builtin_plugins and self.plugin_manager.get_plugin(CoreCommandsPlugin.manifest.id) is None:
            self.plugin_manager.register_plugin(CoreCommandsPlugin())
        await self.mcp_manager.initialize(settings.mcp_servers)
        self._started = True
        log_event(
            self.logger,
            "container.started",
            llm_instances=len(settings.llm_provider_instances),
            tts_instances=len(settings.tts_provider_instances),
            mcp_servers=len(settings.mcp_servers),
        )

    async def shutdown(self) -> None:
        """Disconnect MCP servers, terminate providers and unload plugins."""
        await self.mcp_manager.terminate()
        await self.llm_instances.shutdown()
        await self.tts_instances.shutdown()
        for plugin in self.plugin_manager.get_all_plugins():
            self.plugin_manager.unregister_plugin(plugin.manifest.id)
        self._started = False
        log_event(self.logger, "container.shutdown")


def build_container(data_dir: Union[str, Path], **kwargs) -> AgentContainer:
    """Return a container persisting settings and plugin config under ``data_dir``.

    Extra keyword arguments are passed to :class:`AgentContainer`.
    """
    root = Path(data_dir)
    repo = SettingsRepository(FileSettingsStorage(root / DEFAULT_SETTINGS_FILE))
    storage = JsonFilePluginConfigStorage(root / DEFAULT_PLUGIN_CONFIG_FILE)
    return AgentContainer(repo, storage, **kwargs)


__all__ = ["AgentContainer", "build_container", "TTS_INSTANCES_SERVICE"]
