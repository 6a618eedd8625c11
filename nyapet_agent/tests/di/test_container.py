"""Composition root: startup restore, persistence wiring and shutdown."""

from __future__ import annotations

import json

import pytest

from nyapet_agent.config.settings import AppSettings, InMemorySettingsStorage, SettingsRepository
from nyapet_agent.di import AgentContainer, build_container
from nyapet_agent.mcp.models import McpServerConfig
from nyapet_agent.plugins.storage import InMemoryPluginConfigStorage
from nyapet_agent.providers.models import ProviderConfig, ProviderInstanceConfig


def _mock_instance(instance_id: str, provider_id: str = "mock") -> ProviderInstanceConfig:
    return ProviderInstanceConfig(
        instance_id=instance_id,
        provider_id=provider_id,
        display_name=instance_id,
        config=ProviderConfig(),
        enabled=True,
    )


@pytest.fixture()
def storage() -> InMemorySettingsStorage:
    return InMemorySettingsStorage(
        AppSettings(
            llm_provider_instances=[_mock_instance("a"), _mock_instance("b")],
            primary_llm_instance_id="b",
            tts_provider_instances=[_mock_instance("voice", "mock_tts")],
            mcp_servers=[
                McpServerConfig(name="home", url="http://home/sse", autoStart=True),
                McpServerConfig(name="lab", url="http://lab/sse"),
            ],
        )
    )


@pytest.fixture()
def container(storage, fake_client_factory) -> AgentContainer:
    return AgentContainer(
        SettingsRepository(storage),
        InMemoryPluginConfigStorage(),
        mcp_client_factory=fake_client_factory,
    )


async def test_start_restores_state(container, storage):
    await container.start()

    assert container.started
    assert container.llm_instances.primary_id == "b"
    assert [c.instance_id for c in container.tts_instances.configs()] == ["voice"]
    assert container.plugin_manager.get_plugin("builtin.core-commands") is not None
    assert [t.name for t in container.plugin_manager.get_all_tools()] == ["home_tool"]
    assert container.mcp_manager.server_statuses["home"].connected
    assert not container.mcp_manager.server_statuses["lab"].connected
    assert storage.saved == []

    primary = await container.llm_instances.get_primary()
    assert primary is not None

    await container.start()
    assert len(container.plugin_manager.get_all_plugins()) == 1


async def test_model_command_sees_llm_instances(container):
    await container.start()
    out = await container.plugin_manager.execute_command("/model")
    assert out.splitlines()[0] == "Primary LLM provider: b"


async def test_mutations_are_persisted(container, storage):
    await container.start()

    container.llm_instances.add_instance(_mock_instance("c"))
    container.llm_instances.set_primary("c")
    container.mcp_manager.add_server_config(McpServerConfig(name="new", url="http://new/sse"))

    saved = storage.current
    assert [i.instance_id for i in saved.llm_provider_instances] == ["a", "b", "c"]
    assert saved.primary_llm_instance_id == "c"
    assert [s.name for s in saved.mcp_servers] == ["home", "lab", "new"]
    assert [i.instance_id for i in saved.tts_provider_instances] == ["voice"]

    await container.mcp_manager.remove_server_config("home")
    assert [s.name for s in storage.current.mcp_servers] == ["lab", "new"]
    assert container.plugin_manager.get_all_tools() == []


async def test_shutdown_releases_everything(container, fake_client_factory):
    await container.start()
    await container.llm_instances.get_primary()
    await container.shutdown()

    assert not container.started
    assert all(c.closed for c in fake_client_factory.created)
    assert container.plugin_manager.get_all_plugins() == []
    assert container.llm_instances.get_provider("b") is None


async def test_builtin_plugins_can_be_skipped(storage, fake_client_factory):
    container = AgentContainer(
        SettingsRepository(storage), mcp_client_factory=fake_client_factory, builtin_plugins=False
    )
    await container.start()
    assert container.plugin_manager.get_all_plugins() == []


async def test_build_container_uses_data_dir(tmp_path, fake_client_factory):
    container = build_container(tmp_path, mcp_client_factory=fake_client_factory)
    await container.start()
    container.llm_instances.add_instance(_mock_instance("main"))
    container.plugin_manager.save_plugin_config("builtin.core-commands", {"x": 1})
    await container.shutdown()

    settings = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert settings["primary_llm_instance_id"] == "main"
    plugin_configs = json.loads((tmp_path / "plugin_configs.json").read_text(encoding="utf-8"))
    assert plugin_configs == {"builtin.core-commands": {"x": 1}}

    reopened = build_container(tmp_path, mcp_client_factory=fake_client_factory)
    await reopened.start()
    assert [c.instance_id for c in reopened.llm_instances.configs()] == ["main"]
    await reopened.shutdown()
