"""PluginManager: tool union, command registry, plugin lifecycle and config."""

from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from nyapet_agent.plugins.base import (
    BasePlugin,
    CommandSpec,
    PluginCapability,
    PluginManifest,
    PluginStatus,
)
from nyapet_agent.plugins.manager import PluginManager
from nyapet_agent.plugins.storage import InMemoryPluginConfigStorage
from nyapet_agent.plugins.tools import ToolDefinition, ToolResult


class EchoPlugin(BasePlugin):
    manifest = PluginManifest(id="test.echo", name="Echo", capabilities=[PluginCapability.COMMAND])

    def __init__(self) -> None:
        super().__init__()
        self.unloaded = 0
        self.config_events: List[Dict[str, Any]] = []

    def get_commands(self) -> List[CommandSpec]:
        return [CommandSpec("echo", "Repeat the arguments", lambda args: args or "(empty)")]

    def on_unload(self) -> None:
        super().on_unload()
        self.unloaded += 1

    def on_config_changed(self, config: Dict[str, Any]) -> None:
        super().on_config_changed(config)
        self.config_events.append(config)


class WeatherPlugin(BasePlugin):
    manifest = PluginManifest(
        id="test.weather",
        name="Weather",
        capabilities=[PluginCapability.TOOL],
        dependencies=["test.echo"],
    )

    provider_id = "test.weather"
    provider_name = "Weather"

    def get_tools(self) -> List[ToolDefinition]:
        return [ToolDefinition(name="forecast", description="Tomorrow's weather")]

    async def execute_tool(self, name: str, arguments: Dict[str, Any]) -> ToolResult:
        return ToolResult.ok({"city": arguments.get("city"), "sky": "clear"})


class PanelPlugin(BasePlugin):
    manifest = PluginManifest(id="test.panel", name="Panel", capabilities=[PluginCapability.PANEL])

    panel_id = "stats"
    panel_title = "Stats"

    def get_panel_description(self) -> str:
        return "Pet statistics"


class BrokenPlugin(BasePlugin):
    manifest = PluginManifest(id="test.broken", name="Broken", capabilities=[PluginCapability.COMMAND])

    def get_commands(self) -> List[CommandSpec]:
        return [CommandSpec("never", "unreachable", lambda args: "")]

    def on_load(self, context) -> None:
        raise OSError("disk on fire")


@pytest.fixture()
def manager(plugin_storage) -> PluginManager:
    return PluginManager(plugin_storage)


# ----- tools -----


async def test_tool_union_across_providers(manager, tool_provider_cls):
    manager.register_tool_provider(tool_provider_cls("alpha", ["a1", "a2"]))
    manager.register_tool_provider(tool_provider_cls("beta", ["b1"]))

    assert [t.name for t in manager.get_all_tools()] == ["a1", "a2", "b1"]
    assert [s["name"] for s in manager.get_tool_schemas()] == ["a1", "a2", "b1"]
    assert manager.get_tool_schemas()[0] == {"name": "a1", "description": "a1 from alpha", "parameters": None}


async def test_duplicate_names_resolve_to_first_provider(manager, tool_provider_cls):
    first = tool_provider_cls("alpha", ["shared"])
    second = tool_provider_cls("beta", ["shared", "solo"])
    manager.register_tool_provider(first)
    manager.register_tool_provider(second)

    tools = manager.get_all_tools()
    assert [t.name for t in tools] == ["shared", "solo"]
    assert tools[0].description == "shared from alpha"

    result = await manager.execute_tool("shared", {"x": 1})
    assert result.result == "alpha:shared"
    assert first.calls == [("shared", {"x": 1})]
    assert second.calls == []

    listed = manager.get_all_tools_with_source()
    assert [(i.definition.name, i.provider_id) for i in listed] == [
        ("shared", "alpha"),
        ("shared", "beta"),
        ("solo", "beta"),
    ]


async def test_override_disables_tool(manager, tool_provider_cls):
    manager.register_tool_provider(tool_provider_cls("alpha", ["a1", "a2"]))
    manager.set_tool_enabled("a1", False)

    assert [t.name for t in manager.get_all_tools()] == ["a2"]
    assert not manager.is_tool_enabled("a1")
    result = await manager.execute_tool("a1")
    assert not result.success
    assert result.error == "Tool disabled: a1"
    flags = {i.definition.name: i.enabled for i in manager.get_all_tools_with_source()}
    assert flags == {"a1": False, "a2": True}

    manager.set_tool_enabled("a1", True)
    assert [t.name for t in manager.get_all_tools()] == ["a1", "a2"]


async def test_disabled_provider_is_skipped(manager, tool_provider_cls):
    provider = tool_provider_cls("alpha", ["a1"])
    provider.enabled = False
    manager.register_tool_provider(provider)

    assert manager.get_all_tools() == []
    assert (await manager.execute_tool("a1")).error == "Tool not found: a1"
    assert [i.enabled for i in manager.get_all_tools_with_source()] == [False]


async def test_unknown_tool(manager):
    result = await manager.execute_tool("nope", {})
    assert result == ToolResult(success=False, error="Tool not found: nope")


async def test_provider_exception_becomes_failed_result(manager, tool_provider_cls):
    manager.register_tool_provider(tool_provider_cls("alpha", ["a1"], fail_with=ValueError("bad input")))
    result = await manager.execute_tool("a1", {})
    assert not result.success
    assert result.error == "bad input"


async def test_provider_exception_without_message_uses_type_name(manager, tool_provider_cls):
    manager.register_tool_provider(tool_provider_cls("alpha", ["a1"], fail_with=TimeoutError()))
    result = await manager.execute_tool("a1", {})
    assert result.error == "TimeoutError"


def test_reregistering_provider_id_replaces(manager, tool_provider_cls):
    manager.register_tool_provider(tool_provider_cls("alpha", ["old"]))
    manager.register_tool_provider(tool_provider_cls("alpha", ["new"]))
    assert [t.name for t in manager.get_all_tools()] == ["new"]
    assert manager.unregister_tool_provider("alpha")
    assert not manager.unregister_tool_provider("alpha")
    assert manager.get_all_tools() == []


def test_snapshot_is_not_affected_by_later_mutation(manager, tool_provider_cls):
    manager.register_tool_provider(tool_provider_cls("alpha", ["a1"]))
    snapshot = manager.get_tool_providers()
    manager.unregister_tool_provider("alpha")
    assert [p.provider_id for p in snapshot] == ["alpha"]


# ----- plugins -----


async def test_plugin_tools_and_commands_are_collected(manager):
    manager.register_plugin(EchoPlugin())
    manager.register_plugin(WeatherPlugin())

    assert [t.name for t in manager.get_all_tools()] == ["forecast"]
    result = await manager.execute_tool("forecast", {"city": "Kyoto"})
    assert result.result == {"city": "Kyoto", "sky": "clear"}
    assert manager.get_registered_commands() == ["echo"]
    assert manager.get_command_definitions()[0].source == "test.echo"


def test_duplicate_plugin_id_rejected(manager):
    manager.register_plugin(EchoPlugin())
    with pytest.raises(ValueError, match="already registered"):
        manager.register_plugin(EchoPlugin())


def test_missing_dependency_rejected(manager):
    with pytest.raises(ValueError, match="missing dependencies"):
        manager.register_plugin(WeatherPlugin())
    assert manager.get_all_plugins() == []


def test_failed_load_rolls_back(manager):
    with pytest.raises(RuntimeError, match="disk on fire"):
        manager.register_plugin(BrokenPlugin())
    assert manager.get_plugin("test.broken") is None
    assert manager.get_registered_commands() == []


def test_unregister_plugin_drops_owned_commands(manager):
    plugin = EchoPlugin()
    manager.register_plugin(plugin)
    manager.register_command("other", "Not owned", lambda args: "x", source="host")

    assert manager.unregister_plugin("test.echo")
    assert plugin.unloaded == 1
    assert plugin.context is None
    assert manager.get_registered_commands() == ["other"]
    assert not manager.unregister_plugin("test.echo")


def test_reload_plugin_recollects_commands(manager):
    plugin = EchoPlugin()
    manager.register_plugin(plugin)
    manager.unregister_command("echo")

    assert manager.reload_plugin("test.echo")
    assert plugin.unloaded == 1
    assert manager.get_registered_commands() == ["echo"]
    assert not manager.reload_plugin("missing")


def test_lookup_helpers(manager):
    echo = EchoPlugin()
    manager.register_plugin(echo)
    manager.register_plugin(WeatherPlugin())

    assert manager.get_plugin_by_name("Echo") is echo
    assert manager.get_plugin_by_name("Nope") is None
    assert [p.manifest.id for p in manager.get_plugins_by_capability(PluginCapability.TOOL)] == ["test.weather"]


def test_panels_of_enabled_plugins(manager):
    panel = PanelPlugin()
    manager.register_plugin(panel)
    manager.register_plugin(EchoPlugin())
    assert manager.get_panels() == [panel]

    assert manager.set_plugin_enabled("test.panel", False)
    assert panel.status is PluginStatus.DISABLED
    assert manager.get_panels() == []
    assert not manager.set_plugin_enabled("missing", True)


def test_context_reaches_manager_and_services(plugin_storage):
    manager = PluginManager(plugin_storage, services={"clock": "tick"})
    plugin = EchoPlugin()
    manager.register_plugin(plugin)

    assert plugin.context.manager is manager
    assert plugin.context.get_service("clock") == "tick"
    assert plugin.context.get_service("missing") is None
    assert plugin.context.get_plugin("test.echo") is plugin
    plugin.context.register_command("hi", "Say hi", lambda args: "hi")
    assert manager.get_command_definitions()[-1].source == "test.echo"


# ----- commands -----


async def test_command_names_are_normalized(manager):
    manager.register_command("/ping", "Ping", lambda args: "pong")
    assert manager.get_registered_commands() == ["ping"]
    assert manager.get_command_handler("/ping") is not None
    assert await manager.execute_command("/ping") == "pong"


async def test_disabled_command_is_listed_but_not_callable(manager):
    manager.register_command("ping", "Ping", lambda args: "pong")
    assert manager.set_command_enabled("ping", False)

    assert manager.get_command_handler("ping") is None
    assert manager.get_registered_commands() == ["ping"]
    assert manager.get_command_definitions()[0].enabled is False
    assert await manager.execute_command("/ping") == "Unknown command: /ping"
    assert not manager.set_command_enabled("missing", True)


async def test_execute_command_passes_arguments_and_awaits(manager):
    async def shout(args: str) -> str:
        return args.upper()

    manager.register_command("shout", "Shout", shout)
    assert await manager.execute_command("/shout  meow meow ") == "MEOW MEOW"


async def test_execute_command_non_command_text(manager):
    assert await manager.execute_command("hello") is None
    assert await manager.execute_command("/") is None


async def test_execute_command_failure_is_reported(manager):
    def boom(args: str) -> str:
        raise KeyError("missing")

    manager.register_command("boom", "Fails", boom)
    assert await manager.execute_command("/boom") == "Command /boom failed: 'missing'"


async def test_unknown_command(manager):
    assert await manager.execute_command("/nothing here") == "Unknown command: /nothing"


# ----- plugin configuration -----


def test_config_is_persisted_in_full(plugin_storage):
    manager = PluginManager(plugin_storage)
    manager.save_plugin_config("a", {"volume": 3})
    manager.save_plugin_config("b", {"theme": "dark"})

    assert json.loads(plugin_storage.text) == {"a": {"volume": 3}, "b": {"theme": "dark"}}
    assert plugin_storage.save_count == 2

    reloaded = PluginManager(plugin_storage)
    assert reloaded.get_plugin_config("a") == {"volume": 3}
    assert reloaded.has_plugin_data("b")


def test_config_copy_is_detached(manager):
    manager.save_plugin_config("a", {"volume": 3})
    manager.get_plugin_config("a")["volume"] = 11
    assert manager.get_plugin_config("a") == {"volume": 3}
    assert manager.get_plugin_config("unknown") == {}


def test_config_change_notifies_loaded_plugin(manager):
    plugin = EchoPlugin()
    manager.register_plugin(plugin)
    plugin.context.save_config({"prefix": ">"})

    assert plugin.config_events == [{"prefix": ">"}]
    assert plugin.config == {"prefix": ">"}
    assert plugin.context.get_config() == {"prefix": ">"}


def test_plugin_sees_stored_config_on_load():
    storage = InMemoryPluginConfigStorage(json.dumps({"test.echo": {"prefix": "~"}}))
    manager = PluginManager(storage)
    plugin = EchoPlugin()
    manager.register_plugin(plugin)
    assert plugin.config == {"prefix": "~"}


@pytest.mark.parametrize("text", ["{not json", "[1, 2]", '"text"'])
def test_malformed_document_loads_as_empty(text):
    manager = PluginManager(InMemoryPluginConfigStorage(text))
    assert not manager.has_plugin_data("a")
    manager.save_plugin_config("a", {"k": 1})
    assert manager.get_plugin_config("a") == {"k": 1}


def test_non_object_entries_are_skipped():
    manager = PluginManager(InMemoryPluginConfigStorage(json.dumps({"a": 5, "b": {"k": 1}})))
    assert not manager.has_plugin_data("a")
    assert manager.get_plugin_config("b") == {"k": 1}


def test_clear_plugin_data(plugin_storage):
    manager = PluginManager(plugin_storage)
    manager.save_plugin_config("a", {"k": 1})
    manager.save_plugin_config("b", {"k": 2})

    manager.clear_plugin_data("a")
    assert json.loads(plugin_storage.text) == {"b": {"k": 2}}

    manager.clear_all_plugin_data()
    assert plugin_storage.text is None
    assert not manager.has_plugin_data("b")
