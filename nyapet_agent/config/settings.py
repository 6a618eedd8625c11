"""Persisted application settings.

:class:`AppSettings` is the one document the runtime persists for itself:
provider instances per capability, the primary selections, MCP servers and
a few chat switches. It is stored through the narrow :class:`SettingsStorage`
port; :class:`FileSettingsStorage` keeps it in a JSON or YAML file picked by
the file extension.

A missing file loads defaults silently. A malformed file (invalid syntax,
non-mapping root, failed validation) also loads defaults and logs a warning
so startup never fails on a corrupted settings file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..base.logging import get_logger, log_event
from ..mcp.models import McpServerConfig
from ..providers.models import ProviderInstanceConfig

_logger = get_logger("config.settings")

_YAML_SUFFIXES = (".yaml", ".yml")


class AppSettings(BaseModel):
    llm_provider_instances: List[ProviderInstanceConfig] = Field(default_factory=list)
    primary_llm_instance_id: Optional[str] = None
    tts_provider_instances: List[ProviderInstanceConfig] = Field(default_factory=list)
    primary_tts_instance_id: Optional[str] = None
    mcp_servers: List[McpServerConfig] = Field(default_factory=list)
    tool_calling_enabled: bool = True
    llm_stream: bool = True


class SettingsStorage(Protocol):
    def load(self) -> AppSettings:
        ...

    def save(self, settings: AppSettings) -> None:
        ...


class InMemorySettingsStorage:
    """Keeps the settings in memory; ``saved`` records every save."""

    def __init__(self, initial: Optional[AppSettings] = None) -> None:
        self.current = initial or AppSettings()
        self.saved: List[AppSettings] = []

    def load(self) -> AppSettings:
        return self.current.model_copy(deep=True)

    def save(self, settings: AppSettings) -> None:
        self.current = settings.model_copy(deep=True)
        self.saved.append(self.current)


class FileSettingsStorage:
    """JSON or YAML file storage.

    Parameters
    ----------
    path:
        Target file. ``.yaml``/``.yml`` selects YAML (PyYAML ``safe_dump``),
        anything else JSON.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    @property
    def is_yaml(self) -> bool:
        return self.path.suffix.lower() in _YAML_SUFFIXES

    def load(self) -> AppSettings:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return AppSettings()
        except (OSError, UnicodeDecodeError) as exc:
            self._warn("settings.malformed", str(exc))
            return AppSettings()
        try:
            data: Any = yaml.safe_load(text) if self.is_yaml else json.loads(text)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            self._warn("settings.malformed", str(exc))
            return AppSettings()
        if data is None:
            return AppSettings()
        if not isinstance(data, dict):
            self._warn("settings.malformed", f"expected a mapping, got {type(data).__name__}")
            return AppSettings()
        try:
            return AppSettings.model_validate(data)
        except ValidationError as exc:
            self._warn("settings.invalid", str(exc))
            return AppSettings()

    def save(self, settings: AppSettings) -> None:
        data: Dict[str, Any] = settings.model_dump(mode="json")
        if self.is_yaml:
            text = yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
        else:
            text = json.dumps(data, ensure_ascii=False, indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, self.path)
        log_event(_logger, "settings.saved", path=str(self.path), format="yaml" if self.is_yaml else "json")

    def _warn(self, event: str, error: str) -> None:
        log_event(_logger, event, level=logging.WARNING, path=str(self.path), error=error)


class SettingsRepository:
    """Cached access to :class:`AppSettings` with save-on-write.

    The settings are loaded lazily on first access. ``update`` applies a
    transform and persists the result immediately.
    """

    def __init__(self, storage: SettingsStorage) -> None:
        self._storage = storage
        self._settings: Optional[AppSettings] = None

    def load(self) -> AppSettings:
        """Re-read the settings from storage."""
        self._settings = self._storage.load()
        return self._settings

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            return self.load()
        return self._settings

    def update(self, fn: Callable[[AppSettings], AppSettings]) -> AppSettings:
        updated = fn(self.settings.model_copy(deep=True))
        self._settings = updated
        self._storage.save(updated)
        return updated

    def reset_to_defaults(self) -> AppSettings:
        self._settings = AppSettings()
        self._storage.save(self._settings)
        log_event(_logger, "settings.reset")
        return self._settings


__all__ = [
    "AppSettings",
    "SettingsStorage",
    "InMemorySettingsStorage",
    "FileSettingsStorage",
    "SettingsRepository",
]
