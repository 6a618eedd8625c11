"""Shared HTTP client builder.

Purpose:
    Every network-facing component (LLM/TTS providers, MCP clients) obtains
    its ``httpx.AsyncClient`` here so timeout and proxy handling stay uniform.

External dependencies:
    - ``httpx`` for the asynchronous HTTP client.

Timeout strategy:
    - ``timeout`` may be a number of seconds, an ``httpx.Timeout`` or
      ``None``. When omitted the provider default from
      :func:`get_timeout_config` applies.

Lifecycle:
    - Clients are owned by the caller and must be closed with ``aclose()``
      (providers do this in ``terminate()``, MCP clients in ``close()``).
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

import httpx

from ..timeouts import get_timeout_config

TimeoutLike = Union[float, int, httpx.Timeout, None]

_UNSET = object()


def build_http_client(
    *,
    timeout: TimeoutLike | object = _UNSET,
    proxy: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return a new ``httpx.AsyncClient`` configured with timeout and proxy.

    Parameters:
        timeout: Seconds, an ``httpx.Timeout`` or ``None`` (no timeout).
            Defaults to ``provider_http_timeout_seconds``.
        proxy: Optional proxy URL (``http://host:port``). Blank values are
            ignored.
        headers: Default headers sent with every request.
        base_url: Optional base URL for relative requests.
        transport: Optional transport override (tests use
            ``httpx.MockTransport``).
    """
    if timeout is _UNSET:
        timeout = get_timeout_config().provider_http_timeout_seconds
    kwargs = {
        "timeout": timeout,
        "headers": dict(headers or {}),
    }
    if base_url:
        kwargs["base_url"] = base_url
    if transport is not None:
        kwargs["transport"] = transport
    elif proxy and proxy.strip():
        kwargs["proxy"] = proxy.strip()
    return httpx.AsyncClient(**kwargs)


__all__ = ["build_http_client", "TimeoutLike"]
