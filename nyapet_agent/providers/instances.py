"""Provider instance management.

One :class:`ProviderInstanceManager` exists per capability (LLM, TTS). It
owns the persisted :class:`ProviderInstanceConfig` list, the live provider
objects created from it through a :class:`ProviderRegistry`, and the
"primary" selection.

Contract:
- Every mutation (add, remove, update, enable, disable, set primary) calls
  the ``persist`` callback immediately with the full config list and the
  primary id.
- The first instance added becomes primary; removing the primary falls
  back to the first remaining instance (or none).
- Providers are created lazily: on ``initialize_instance`` / ``enable`` or
  the first ``get_primary()`` of an enabled primary instance.
- Lifecycle failures are reported as ``TestResult(success=False)`` and the
  instance status becomes ``error``; they never raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from ..base.logging import get_logger, log_event
from .models import ProviderInstanceConfig, ProviderInstanceInfo, ProviderStatus, TestResult
from .registry import ProviderRegistry

P = TypeVar("P")

PersistCallback = Callable[[List[ProviderInstanceConfig], Optional[str]], None]


@dataclass
class _Entry(Generic[P]):
    config: ProviderInstanceConfig
    provider: Optional[P] = None
    status: ProviderStatus = ProviderStatus.IDLE
    error: Optional[str] = None


class ProviderInstanceManager(Generic[P]):
    """CRUD, lifecycle and primary selection for provider instances.

    Parameters:
        registry: Registry used to resolve ``provider_id`` and create providers.
        persist: Optional callback receiving ``(instances, primary_id)`` after
            every mutation.
        kind: Label used in log events (``"llm"`` / ``"tts"``).
    """

    def __init__(
        self,
        registry: ProviderRegistry[P],
        persist: Optional[PersistCallback] = None,
        kind: str = "llm",
    ) -> None:
        self._registry = registry
        self._persist = persist
        self.kind = kind
        self._entries: Dict[str, _Entry[P]] = {}
        self._primary_id: Optional[str] = None
        self._logger = get_logger(f"providers.instances.{kind}")

    # ----- persistence -----
    @property
    def primary_id(self) -> Optional[str]:
        return self._primary_id

    def configs(self) -> List[ProviderInstanceConfig]:
        return [e.config for e in self._entries.values()]

    def _save(self) -> None:
        if self._persist is not None:
            self._persist(self.configs(), self._primary_id)

    def load(self, instances: Iterable[ProviderInstanceConfig], primary_id: Optional[str] = None) -> None:
        """Replace the config list without persisting (startup restore).

        Instances of unknown provider types are skipped and logged. A primary
        id that does not match a loaded instance falls back to the first one.
        """
        entries: Dict[str, _Entry[P]] = {}
        for cfg in instances:
            if not self._registry.has(cfg.provider_id):
                log_event(self._logger, "instances.load_skipped", instance_id=cfg.instance_id, provider_id=cfg.provider_id)
                continue
            entries[cfg.instance_id] = _Entry(cfg)
        self._entries = entries
        if primary_id in entries:
            self._primary_id = primary_id
        else:
            self._primary_id = next(iter(entries), None)
        log_event(self._logger, "instances.load", kind=self.kind, count=len(entries), primary=self._primary_id)

    # ----- CRUD -----
    def add_instance(self, config: ProviderInstanceConfig) -> bool:
        """Add ``config``; ``False`` when its provider type is unknown."""
        if not self._registry.has(config.provider_id):
            log_event(self._logger, "instances.add_rejected", instance_id=config.instance_id, provider_id=config.provider_id)
            return False
        self._entries = {**self._entries, config.instance_id: _Entry(config)}
        if len(self._entries) == 1 or self._primary_id is None:
            self._primary_id = config.instance_id
        log_event(self._logger, "instances.add", kind=self.kind, instance_id=config.instance_id, provider_id=config.provider_id)
        self._save()
        return True

    async def remove_instance(self, instance_id: str) -> bool:
        entry = self._entries.get(instance_id)
        if entry is None:
            return False
        entries = dict(self._entries)
        del entries[instance_id]
        self._entries = entries
        if self._primary_id == instance_id:
            self._primary_id = next(iter(entries), None)
        log_event(self._logger, "instances.remove", kind=self.kind, instance_id=instance_id, primary=self._primary_id)
        self._save()
        await self._terminate(entry)
        return True

    async def update_instance(self, instance_id: str, config: ProviderInstanceConfig) -> bool:
        """Replace the config of ``instance_id``, tearing the live provider down.

        When the new config is enabled the instance is re-initialized.
        """
        entry = self._entries.get(instance_id)
        if entry is None:
            return False
        await self._terminate(entry)
        entry.config = config.model_copy(update={"instance_id": instance_id})
        entry.provider = None
        entry.status = ProviderStatus.IDLE
        entry.error = None
        self._save()
        log_event(self._logger, "instances.update", kind=self.kind, instance_id=instance_id, enabled=config.enabled)
        if config.enabled:
            await self.initialize_instance(instance_id)
        return True

    # ----- lifecycle -----
    async def initialize_instance(self, instance_id: str) -> TestResult:
        entry = self._entries.get(instance_id)
        if entry is None:
            return TestResult(success=False, error=f"Instance not found: {instance_id}")
        await self._terminate(entry)
        entry.status = ProviderStatus.CONNECTING
        entry.error = None
        try:
            provider = self._registry.create(entry.config.provider_id, entry.config.config)
            if provider is None:
                raise LookupError(f"Unknown provider type: {entry.config.provider_id}")
            await provider.initialize()  # type: ignore[attr-defined]
        except Exception as exc:  # noqa: BLE001 - reported through TestResult
            entry.status = ProviderStatus.ERROR
            entry.error = str(exc)
            log_event(self._logger, "instances.initialize_failed", kind=self.kind, instance_id=instance_id, error=str(exc))
            return TestResult(success=False, error=str(exc))
        entry.provider = provider
        entry.status = ProviderStatus.CONNECTED
        log_event(self._logger, "instances.initialized", kind=self.kind, instance_id=instance_id)
        return TestResult(success=True)

    async def disconnect_instance(self, instance_id: str) -> TestResult:
        entry = self._entries.get(instance_id)
        if entry is None:
            return TestResult(success=False, error=f"Instance not found: {instance_id}")
        try:
            await self._terminate(entry, raise_errors=True)
        except Exception as exc:  # noqa: BLE001 - reported through TestResult
            entry.status = ProviderStatus.ERROR
            entry.error = str(exc)
            return TestResult(success=False, error=str(exc))
        return TestResult(success=True)

    async def enable_instance(self, instance_id: str) -> TestResult:
        entry = self._entries.get(instance_id)
        if entry is None:
            return TestResult(success=False, error=f"Instance not found: {instance_id}")
        entry.config = entry.config.model_copy(update={"enabled": True})
        self._save()
        return await self.initialize_instance(instance_id)

    async def disable_instance(self, instance_id: str) -> TestResult:
        entry = self._entries.get(instance_id)
        if entry is None:
            return TestResult(success=False, error=f"Instance not found: {instance_id}")
        entry.config = entry.config.model_copy(update={"enabled": False})
        await self._terminate(entry)
        self._save()
        return TestResult(success=True)

    async def test_instance(self, instance_id: str) -> TestResult:
        """Run the provider's connectivity check, creating it when needed."""
        entry = self._entries.get(instance_id)
        if entry is None:
            return TestResult(success=False, error=f"Instance not found: {instance_id}")
        if entry.provider is None:
            result = await self.initialize_instance(instance_id)
            if not result.success:
                return result
        return await entry.provider.test()  # type: ignore[union-attr]

    async def _terminate(self, entry: _Entry[P], raise_errors: bool = False) -> None:
        provider, entry.provider = entry.provider, None
        entry.status = ProviderStatus.IDLE
        entry.error = None
        if provider is None:
            return
        try:
            await provider.terminate()  # type: ignore[attr-defined]
        except Exception as exc:  # noqa: BLE001 - teardown continues
            log_event(self._logger, "instances.terminate_failed", kind=self.kind, instance_id=entry.config.instance_id, error=str(exc))
            if raise_errors:
                raise

    # ----- primary -----
    def set_primary(self, instance_id: str) -> bool:
        if instance_id not in self._entries:
            return False
        self._primary_id = instance_id
        log_event(self._logger, "instances.set_primary", kind=self.kind, instance_id=instance_id)
        self._save()
        return True

    async def get_primary(self) -> Optional[P]:
        """Return the primary provider, creating it on first use.

        ``None`` when there is no primary or the primary instance is disabled
        or fails to initialize.
        """
        entry = self._entries.get(self._primary_id or "")
        if entry is None:
            return None
        if entry.provider is None:
            if not entry.config.enabled:
                return None
            await self.initialize_instance(entry.config.instance_id)
        return entry.provider

    def get_provider(self, instance_id: str) -> Optional[P]:
        entry = self._entries.get(instance_id)
        return entry.provider if entry else None

    # ----- views -----
    def list_instances(self) -> List[ProviderInstanceInfo]:
        return [
            ProviderInstanceInfo(
                instance_id=e.config.instance_id,
                provider_id=e.config.provider_id,
                display_name=e.config.display_name,
                config=e.config.config,
                metadata=self._registry.get(e.config.provider_id),
                enabled=e.config.enabled,
                status=e.status,
                error=e.error,
                is_primary=e.config.instance_id == self._primary_id,
            )
            for e in self._entries.values()
        ]

    async def shutdown(self) -> None:
        """Terminate every live provider (configs are kept)."""
        for entry in list(self._entries.values()):
            await self._terminate(entry)


__all__ = ["ProviderInstanceManager", "PersistCallback"]
