"""Provider registries.

Purpose
-------
Map a provider *type* id (``"openai"``, ``"elevenlabs"``...) to its static
:class:`ProviderMetadata` and a factory producing provider instances from a
persisted :class:`ProviderConfig`.

Design notes
------------
- One registry per capability: LLM providers and TTS providers never share
  an id namespace.
- Registries are plain objects owned by whoever builds them (the DI
  container, a test). :func:`build_default_llm_registry` and
  :func:`build_default_tts_registry` return *fresh* registries populated with
  the built-in adapters, imported lazily via ``importlib``.
- Registering an existing id replaces the earlier entry in place, keeping the
  original position in :meth:`ProviderRegistry.get_all`.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from ..base.logging import get_logger, log_event
from .base import LLMProvider, TTSProvider
from .models import ProviderConfig, ProviderConfigField, ProviderMetadata

P = TypeVar("P")

ProviderFactory = Callable[[ProviderConfig], P]

# Capability switches appended to every LLM provider's config schema.
PROVIDER_CAPABILITY_FIELDS: Tuple[ProviderConfigField, ...] = (
    ProviderConfigField(
        key="supportsText",
        label="Text chat",
        type="boolean",
        default="true",
        description="Whether the model accepts text conversations",
    ),
    ProviderConfigField(
        key="supportsVision",
        label="Image input",
        type="boolean",
        default="false",
        description="Whether the model accepts images (vision)",
    ),
    ProviderConfigField(
        key="supportsFile",
        label="File input",
        type="boolean",
        default="false",
        description="Whether the model accepts file uploads",
    ),
    ProviderConfigField(
        key="supportsToolCalling",
        label="Tool calling",
        type="boolean",
        default="true",
        description="Whether the model supports function calling",
    ),
)


def with_capability_fields(metadata: ProviderMetadata) -> ProviderMetadata:
    """Return ``metadata`` with :data:`PROVIDER_CAPABILITY_FIELDS` appended.

    Fields already declared by the provider are not duplicated.
    """
    declared = {f.key for f in metadata.config_schema}
    extra = tuple(f for f in PROVIDER_CAPABILITY_FIELDS if f.key not in declared)
    if not extra:
        return metadata
    return metadata.model_copy(update={"config_schema": metadata.config_schema + extra})


@dataclass(frozen=True)
class _Entry(Generic[P]):
    metadata: ProviderMetadata
    factory: Callable[[ProviderConfig], P]


class ProviderRegistry(Generic[P]):
    """Registry of provider types for one capability.

    Parameters
    ----------
    kind:
        Label used in log events (``"llm"`` or ``"tts"``).
    """

    def __init__(self, kind: str = "llm") -> None:
        self.kind = kind
        self._entries: Dict[str, _Entry[P]] = {}
        self._logger = get_logger(f"providers.registry.{kind}")

    def register(self, metadata: ProviderMetadata, factory: Callable[[ProviderConfig], P]) -> None:
        """Register (or replace) the provider type described by ``metadata``."""
        replaced = metadata.id in self._entries
        entries = dict(self._entries)
        entries[metadata.id] = _Entry(metadata, factory)
        self._entries = entries
        log_event(self._logger, "provider_registry.register", kind=self.kind, provider_id=metadata.id, replaced=replaced)

    def unregister(self, type_id: str) -> bool:
        if type_id not in self._entries:
            return False
        entries = dict(self._entries)
        del entries[type_id]
        self._entries = entries
        return True

    def create(self, type_id: str, config: ProviderConfig) -> Optional[P]:
        """Instantiate the provider ``type_id`` or return ``None`` when unknown."""
        entry = self._entries.get(type_id)
        if entry is None:
            log_event(self._logger, "provider_registry.unknown_type", kind=self.kind, provider_id=type_id)
            return None
        return entry.factory(config)

    def get_all(self) -> List[ProviderMetadata]:
        """Metadata of every registered type, in registration order."""
        return [e.metadata for e in self._entries.values()]

    def get(self, type_id: str) -> Optional[ProviderMetadata]:
        entry = self._entries.get(type_id)
        return entry.metadata if entry else None

    def has(self, type_id: str) -> bool:
        return type_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._entries


# (module path, attribute exposing ``register(registry)``)
_BUILTIN_LLM: Tuple[Tuple[str, str], ...] = (
    ("nyapet_agent.providers.openai", "register_openai_providers"),
    ("nyapet_agent.providers.anthropic", "register_anthropic_provider"),
    ("nyapet_agent.providers.mock", "register_mock_llm_provider"),
)

_BUILTIN_TTS: Tuple[Tuple[str, str], ...] = (
    ("nyapet_agent.providers.tts", "register_tts_providers"),
    ("nyapet_agent.providers.mock", "register_mock_tts_provider"),
)


def _populate(registry: ProviderRegistry, builtins: Tuple[Tuple[str, str], ...]) -> None:
    for module_path, attr in builtins:
        register = getattr(import_module(module_path), attr)
        register(registry)


def build_default_llm_registry() -> ProviderRegistry[LLMProvider]:
    """Return a new LLM registry holding every built-in chat provider."""
    registry: ProviderRegistry[LLMProvider] = ProviderRegistry("llm")
    _populate(registry, _BUILTIN_LLM)
    return registry


def build_default_tts_registry() -> ProviderRegistry[TTSProvider]:
    """Return a new TTS registry holding every built-in speech provider."""
    registry: ProviderRegistry[TTSProvider] = ProviderRegistry("tts")
    _populate(registry, _BUILTIN_TTS)
    return registry


__all__ = [
    "PROVIDER_CAPABILITY_FIELDS",
    "ProviderFactory",
    "ProviderRegistry",
    "with_capability_fields",
    "build_default_llm_registry",
    "build_default_tts_registry",
]
