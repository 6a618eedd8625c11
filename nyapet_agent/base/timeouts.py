"""Unified timeout configuration for providers and MCP clients.

Centralizes every deadline used by the runtime so no module carries its own
numeric literal.

TimeoutConfig
    Frozen dataclass with the normalized values (seconds).

get_timeout_config()
    Returns a process-cached configuration. Environment overrides (all
    optional) are parsed on first use and again whenever their raw values
    change:
        NYAPET_TIMEOUT_MCP_ENDPOINT_SECONDS
        NYAPET_TIMEOUT_MCP_REQUEST_SECONDS
        NYAPET_TIMEOUT_MCP_CONNECT_SECONDS
        NYAPET_TIMEOUT_PROVIDER_HTTP_SECONDS

Non-positive or unparsable values fall back to the defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        mcp_endpoint_timeout_seconds: Wait for the SSE ``endpoint`` event
            after the stream is opened.
        mcp_request_timeout_seconds: Wait for a correlated JSON-RPC response.
        mcp_connect_timeout_seconds: Connect timeout of the MCP HTTP client.
        provider_http_timeout_seconds: Default request timeout for provider
            HTTP clients when the instance config carries none.
    """

    mcp_endpoint_timeout_seconds: float = 10.0
    mcp_request_timeout_seconds: float = 30.0
    mcp_connect_timeout_seconds: float = 10.0
    provider_http_timeout_seconds: float = 60.0


_ENV_NAMES: Tuple[str, ...] = (
    "NYAPET_TIMEOUT_MCP_ENDPOINT_SECONDS",
    "NYAPET_TIMEOUT_MCP_REQUEST_SECONDS",
    "NYAPET_TIMEOUT_MCP_CONNECT_SECONDS",
    "NYAPET_TIMEOUT_PROVIDER_HTTP_SECONDS",
)

_CACHED: TimeoutConfig | None = None
_ENV_GUARD: Tuple[str, ...] | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, returning ``default`` otherwise."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the cached :class:`TimeoutConfig`, refreshed on env change."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = tuple(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED

    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        mcp_endpoint_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.mcp_endpoint_timeout_seconds),
        mcp_request_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.mcp_request_timeout_seconds),
        mcp_connect_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.mcp_connect_timeout_seconds),
        provider_http_timeout_seconds=_parse_env_float(_ENV_NAMES[3], defaults.provider_http_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
]
