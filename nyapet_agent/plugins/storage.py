"""Persistence ports for plugin configuration.

The :class:`PluginManager` keeps every plugin's configuration in one JSON
document keyed by plugin id. Storage implementations only move that document
around as text; parsing and validation stay in the manager.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

from ..base.logging import get_logger, log_event

_logger = get_logger("plugins.storage")


@runtime_checkable
class PluginConfigStorage(Protocol):
    """Text store for the serialized plugin configuration document."""

    def load_all(self) -> Optional[str]:
        ...

    def save_all(self, text: str) -> None:
        ...

    def clear_all(self) -> None:
        ...


class InMemoryPluginConfigStorage:
    """Process-local storage, used by tests and ephemeral hosts."""

    def __init__(self, initial: Optional[str] = None) -> None:
        self.text = initial
        self.save_count = 0

    def load_all(self) -> Optional[str]:
        return self.text

    def save_all(self, text: str) -> None:
        self.text = text
        self.save_count += 1

    def clear_all(self) -> None:
        self.text = None


class JsonFilePluginConfigStorage:
    """Stores the document in a single UTF-8 file.

    Writes go to a sibling temporary file that replaces the target, so a
    crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load_all(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def save_all(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, self.path)
        log_event(_logger, "plugin_config.saved", path=str(self.path), bytes=len(text))

    def clear_all(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        log_event(_logger, "plugin_config.cleared", path=str(self.path))


__all__ = ["PluginConfigStorage", "InMemoryPluginConfigStorage", "JsonFilePluginConfigStorage"]
