"""Built-in slash-commands: ``/help``, ``/tools``, ``/plugins`` and ``/model``."""

from __future__ import annotations

from typing import List

from ..base import BasePlugin, CommandSpec, PluginCapability, PluginContext, PluginManifest

LLM_INSTANCES_SERVICE = "llm_instances"


class CoreCommandsPlugin(BasePlugin):
    manifest = PluginManifest(
        id="builtin.core-commands",
        name="Core Commands",
        version="1.0.0",
        author="NyaDeskPet",
        description="Basic slash-commands: /help, /tools, /plugins, /model",
        capabilities=[PluginCapability.COMMAND],
    )

    def get_commands(self) -> List[CommandSpec]:
        return [
            CommandSpec("help", "Show available commands", self._help),
            CommandSpec("tools", "List registered tools", self._tools),
            CommandSpec("plugins", "List loaded plugins", self._plugins),
            CommandSpec("model", "Show the primary LLM provider", self._model),
        ]

    def _ctx(self) -> PluginContext:
        if self.context is None:
            raise RuntimeError("plugin is not loaded")
        return self.context

    def _help(self, args: str) -> str:
        commands = [c for c in self._ctx().get_all_command_definitions() if c.enabled]
        if not commands:
            return "No commands available"
        return "\n".join(f"/{c.name} - {c.description}" for c in commands)

    def _tools(self, args: str) -> str:
        infos = self._ctx().manager.get_all_tools_with_source()
        if not infos:
            return "No tools registered"
        lines = []
        for info in infos:
            flag = "" if info.enabled else " (disabled)"
            lines.append(f"{info.definition.name} [{info.provider_name}]{flag}")
        return "\n".join(lines)

    def _plugins(self, args: str) -> str:
        plugins = self._ctx().manager.get_all_plugins()
        lines = []
        for plugin in plugins:
            state = "enabled" if plugin.enabled else "disabled"
            lines.append(f"{plugin.manifest.name} ({plugin.manifest.id}) v{plugin.manifest.version} - {state}")
        return "\n".join(lines) or "No plugins loaded"

    async def _model(self, args: str) -> str:
        instances = self._ctx().get_service(LLM_INSTANCES_SERVICE)
        if instances is None:
            return "No LLM provider configured"
        primary = next((i for i in instances.list_instances() if i.is_primary), None)
        if primary is None:
            return "No LLM provider configured"
        model = primary.config.model or "not set"
        return "\n".join(
            [
                f"Primary LLM provider: {primary.display_name}",
                f"Type: {primary.provider_id}",
                f"Model: {model}",
                f"Status: {primary.status.value}",
            ]
        )


__all__ = ["CoreCommandsPlugin", "LLM_INSTANCES_SERVICE"]
