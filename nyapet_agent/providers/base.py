"""LLM and TTS provider base classes.

Purpose:
- Give every vendor adapter the same lifecycle
  (``initialize -> chat/synthesize -> terminate``) and the same helpers for
  configuration lookup, credential checks and HTTP client construction.

Subclasses implement:
- ``metadata()`` returning the static :class:`ProviderMetadata` of the type.
- ``chat()`` (LLM) or ``synthesize()`` (TTS).

They may override ``chat_stream()`` when the vendor supports native
incremental output, and ``get_models()`` / ``get_voices()`` for discovery.

HTTP:
- Clients are created lazily by ``initialize()`` through
  :func:`build_http_client` using ``config.timeout`` and ``config.proxy``.
  Tests inject an ``httpx`` transport via the ``transport`` argument.
"""

from __future__ import annotations

from typing import AsyncIterator, List, Optional, TypeVar

import httpx

from ..base.errors import AgentError, ProviderConfigError, classify_exception
from ..base.http import build_http_client
from ..base.logging import LogContext, get_logger, log_event
from ..config.env import resolve_provider_key
from .models import (
    LLMRequest,
    LLMResponse,
    LLMStreamChunk,
    ProviderConfig,
    ProviderMetadata,
    TestResult,
    TTSRequest,
    TTSResponse,
    VoiceInfo,
)
from .values import get_config_value

T = TypeVar("T")


class _ProviderBase:
    """Behavior shared by LLM and TTS providers."""

    #: Logger name suffix; subclasses override (``providers.openai``).
    logger_name = "providers"

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.config = config
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None
        self._initialized = False
        self._logger = get_logger(self.logger_name)

    def metadata(self) -> ProviderMetadata:  # pragma: no cover - abstract
        """Return the static descriptor of this provider type."""
        raise NotImplementedError

    @property
    def provider_id(self) -> str:
        return self.metadata().id

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ----- lifecycle -----
    async def initialize(self) -> None:
        """Prepare the HTTP client. Calling it again is a no-op."""
        if self._initialized:
            return
        self._http = self._build_http_client()
        self._initialized = True
        log_event(self._logger, "provider.initialize", LogContext(provider=self.provider_id))

    async def terminate(self) -> None:
        """Close the HTTP client and return to the uninitialized state."""
        client, self._http = self._http, None
        self._initialized = False
        if client is not None:
            await client.aclose()
            log_event(self._logger, "provider.terminate", LogContext(provider=self.provider_id))

    async def _ensure_initialized(self) -> httpx.AsyncClient:
        """Lazily initialize and return the HTTP client."""
        if not self._initialized:
            await self.initialize()
        return self._http  # type: ignore[return-value]

    def _build_http_client(self) -> httpx.AsyncClient:
        proxy = get_config_value(self.config, "proxy", "")
        timeout = get_config_value(self.config, "timeout", 0)
        if timeout > 0:
            return build_http_client(timeout=float(timeout), proxy=proxy, transport=self._transport)
        return build_http_client(proxy=proxy, transport=self._transport)

    # ----- config helpers -----
    def get_config_value(self, key: str, default: T) -> T:
        """Typed lookup of a fixed field or ``extra`` entry (see :func:`get_config_value`)."""
        return get_config_value(self.config, key, default)

    def api_key(self) -> Optional[str]:
        """Return the configured credential or the environment fallback."""
        key = get_config_value(self.config, "api_key", "")
        if key:
            return key
        value, _ = resolve_provider_key(self.provider_id)
        return value

    def require_api_key(self) -> str:
        """Return the credential or raise :class:`ProviderConfigError`."""
        key = self.api_key()
        if not key:
            raise ProviderConfigError(f"API key is required for provider '{self.provider_id}'", source=self.provider_id)
        return key

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise :class:`AgentError` for non-2xx responses, keeping the vendor message."""
        if response.is_success:
            return
        message = _vendor_error_message(response)
        exc = httpx.HTTPStatusError(message, request=response.request, response=response)
        code = classify_exception(exc)
        raise AgentError(
            code,
            f"HTTP {response.status_code}: {message}",
            source=self.provider_id,
            retryable=response.status_code in (429, 500, 502, 503, 504),
            raw=exc,
        )


def _vendor_error_message(response: httpx.Response) -> str:
    """Extract ``error.message`` (or ``detail``) from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str):
            return err
        detail = body.get("detail")
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        if isinstance(detail, str):
            return detail
    return response.text


class LLMProvider(_ProviderBase):
    """Base class of chat-completion providers.

    ``chat_stream`` falls back to :meth:`chat` and yields exactly two chunks:
    one with the full text (skipped when the text is empty) and the terminal
    ``done`` chunk. Vendors with native streaming override it.
    """

    logger_name = "providers.llm"

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__(config, transport)
        self._model = config.model or ""

    async def chat(self, request: LLMRequest) -> LLMResponse:  # pragma: no cover - abstract
        raise NotImplementedError

    async def chat_stream(self, request: LLMRequest) -> AsyncIterator[LLMStreamChunk]:
        response = await self.chat(request)
        if response.text:
            yield LLMStreamChunk(
                delta=response.text,
                usage=response.usage,
                reasoning_delta=response.reasoning_content,
            )
        yield LLMStreamChunk(done=True, usage=response.usage, finish_reason=response.finish_reason)

    async def get_models(self) -> List[str]:
        """Return model ids offered by the vendor (empty when unsupported)."""
        return []

    async def test(self) -> TestResult:
        """Check connectivity by listing models.

        An empty model list is reported as a failure; any exception becomes
        ``TestResult(success=False, error=str(exc))``.
        """
        try:
            await self._ensure_initialized()
            models = await self.get_models()
        except Exception as exc:  # noqa: BLE001 - the check reports every failure
            log_event(self._logger, "provider.test_failed", LogContext(provider=self.provider_id), error=str(exc))
            return TestResult(success=False, error=str(exc))
        if not models:
            return TestResult(success=False, error="Model list returned by the API is empty")
        return TestResult(success=True, model=self._model or models[0])

    def set_model(self, model: str) -> None:
        self._model = model

    def get_model(self) -> str:
        return self._model

    def resolve_model(self, request: LLMRequest, default: str = "") -> str:
        return request.model or self._model or get_config_value(self.config, "model", default) or default


class TTSProvider(_ProviderBase):
    """Base class of text-to-speech providers."""

    logger_name = "providers.tts"

    async def synthesize(self, request: TTSRequest) -> TTSResponse:  # pragma: no cover - abstract
        raise NotImplementedError

    async def get_voices(self) -> List[VoiceInfo]:
        return []

    async def test(self) -> TestResult:
        """Check the provider by listing voices; any exception is a failure."""
        try:
            await self._ensure_initialized()
            await self.get_voices()
        except Exception as exc:  # noqa: BLE001 - the check reports every failure
            log_event(self._logger, "provider.test_failed", LogContext(provider=self.provider_id), error=str(exc))
            return TestResult(success=False, error=str(exc))
        return TestResult(success=True)


__all__ = ["LLMProvider", "TTSProvider"]
