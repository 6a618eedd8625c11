import json

from nyapet_agent.plugins.manager import PluginManager
from nyapet_agent.plugins.storage import JsonFilePluginConfigStorage, PluginConfigStorage


def test_file_storage_roundtrip(tmp_path):
    path = tmp_path / "nested" / "plugin_configs.json"
    storage = JsonFilePluginConfigStorage(path)
    assert isinstance(storage, PluginConfigStorage)
    assert storage.load_all() is None

    storage.save_all('{"a": {"k": 1}}')
    assert path.read_text(encoding="utf-8") == '{"a": {"k": 1}}'
    assert not path.with_name("plugin_configs.json.tmp").exists()

    storage.clear_all()
    assert not path.exists()
    storage.clear_all()


def test_manager_persists_through_file(tmp_path):
    storage = JsonFilePluginConfigStorage(tmp_path / "plugins.json")
    PluginManager(storage).save_plugin_config("builtin.core-commands", {"greeting": "にゃ"})

    reloaded = PluginManager(JsonFilePluginConfigStorage(tmp_path / "plugins.json"))
    assert reloaded.get_plugin_config("builtin.core-commands") == {"greeting": "にゃ"}


def test_undecodable_file_loads_as_empty(tmp_path):
    path = tmp_path / "plugins.json"
    path.write_bytes(b'{"weather": {"apiKey": "\xff\xfe"}}')

    manager = PluginManager(JsonFilePluginConfigStorage(path))

    assert not manager.has_plugin_data("weather")
    manager.save_plugin_config("weather", {"apiKey": "k"})
    assert json.loads(path.read_text(encoding="utf-8")) == {"weather": {"apiKey": "k"}}
