"""Settings persistence in JSON and YAML files."""

from __future__ import annotations

import json
import logging

import pytest
import yaml

from nyapet_agent.config.env import get_env_var_candidates, is_placeholder, resolve_provider_key
from nyapet_agent.config.settings import (
    AppSettings,
    FileSettingsStorage,
    InMemorySettingsStorage,
    SettingsRepository,
)
from nyapet_agent.mcp.models import McpServerConfig
from nyapet_agent.providers.models import ProviderConfig, ProviderInstanceConfig


def _sample() -> AppSettings:
    return AppSettings(
        llm_provider_instances=[
            ProviderInstanceConfig(
                instance_id="main",
                provider_id="openai",
                display_name="Main",
                config=ProviderConfig(api_key="sk", extra={"stream": "true"}),
                enabled=True,
            )
        ],
        primary_llm_instance_id="main",
        mcp_servers=[McpServerConfig(name="home", url="http://localhost:3001/sse", autoStart=True)],
        llm_stream=False,
    )


@pytest.mark.parametrize("filename", ["settings.json", "settings.yaml", "settings.yml"])
def test_file_roundtrip(tmp_path, filename):
    storage = FileSettingsStorage(tmp_path / filename)
    storage.save(_sample())
    loaded = storage.load()
    assert loaded == _sample()
    assert loaded.mcp_servers[0].auto_start


def test_format_follows_extension(tmp_path):
    FileSettingsStorage(tmp_path / "a.yaml").save(_sample())
    FileSettingsStorage(tmp_path / "a.json").save(_sample())

    as_yaml = yaml.safe_load((tmp_path / "a.yaml").read_text(encoding="utf-8"))
    as_json = json.loads((tmp_path / "a.json").read_text(encoding="utf-8"))
    assert as_yaml == as_json
    assert as_json["primary_llm_instance_id"] == "main"


def test_missing_file_gives_defaults(tmp_path):
    assert FileSettingsStorage(tmp_path / "none.json").load() == AppSettings()


@pytest.mark.parametrize(
    "filename, text",
    [
        ("s.json", "{broken"),
        ("s.json", "[1, 2]"),
        ("s.yaml", "key: [unclosed"),
        ("s.yaml", "- just\n- a list\n"),
        ("s.json", '{"mcp_servers": [{"name": ""}]}'),
    ],
)
def test_malformed_file_gives_defaults(tmp_path, caplog, filename, text):
    path = tmp_path / filename
    path.write_text(text, encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="nyapet"):
        logger = logging.getLogger("nyapet")
        logger.addHandler(caplog.handler)
        try:
            assert FileSettingsStorage(path).load() == AppSettings()
        finally:
            logger.removeHandler(caplog.handler)
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "s.yaml"
    path.write_text("", encoding="utf-8")
    assert FileSettingsStorage(path).load() == AppSettings()


def test_repository_update_and_reset():
    storage = InMemorySettingsStorage(_sample())
    repo = SettingsRepository(storage)
    assert repo.settings.primary_llm_instance_id == "main"

    original = repo.settings
    updated = repo.update(lambda s: s.model_copy(update={"tool_calling_enabled": False}))
    assert not updated.tool_calling_enabled
    assert original.tool_calling_enabled
    assert storage.current == updated
    assert len(storage.saved) == 1

    assert repo.reset_to_defaults() == AppSettings()
    assert storage.current == AppSettings()


def test_repository_reload_sees_external_changes():
    storage = InMemorySettingsStorage()
    repo = SettingsRepository(storage)
    assert repo.settings.llm_stream
    storage.current = AppSettings(llm_stream=False)
    assert repo.settings.llm_stream
    assert not repo.load().llm_stream


def test_env_credentials(monkeypatch):
    monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
    monkeypatch.setenv("XI_API_KEY", "xi-real")
    assert list(get_env_var_candidates("ElevenLabs")) == ["ELEVENLABS_API_KEY", "XI_API_KEY"]
    assert resolve_provider_key("elevenlabs") == ("xi-real", "XI_API_KEY")

    monkeypatch.setenv("OPENAI_API_KEY", "your-key-placeholder")
    assert resolve_provider_key("openai") == (None, None)
    assert is_placeholder("test_abc")
    assert not is_placeholder(None)
    assert list(get_env_var_candidates("unknown")) == []


@pytest.mark.parametrize("filename", ["s.json", "s.yaml"])
def test_undecodable_file_gives_defaults(tmp_path, filename):
    path = tmp_path / filename
    path.write_bytes(b"\xff\xfe")
    assert FileSettingsStorage(path).load() == AppSettings()
