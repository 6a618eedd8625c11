"""MCP client over the SSE transport (protocol 2024-11-05).

One :class:`McpClient` talks to one server:

1. ``GET {url}`` opens a long-lived event stream in a background task. The
   first ``endpoint`` event names the URL that receives JSON-RPC POSTs.
2. ``initialize`` then the ``notifications/initialized`` notification.
3. ``tools/list`` fills :attr:`McpClient.tools`.

Responses are correlated by id through a table of pending futures. A POST
whose body already is the matching JSON-RPC response completes the request
directly; otherwise the ``message`` events of the stream complete it.

Failure semantics:
- ``connect`` re-raises after leaving the client disconnected with the
  error recorded.
- ``call_tool`` never raises. When a call fails and the client is found
  disconnected it reconnects once and retries once. Concurrent callers
  share one reconnect through a lock.
- A stream that ends or breaks marks the client disconnected and fails every
  pending request. The discovered tools are kept so callers still route
  calls here, which triggers the reconnect.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import time
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..base.errors import AgentError, McpDisconnectedError, McpError, McpProtocolError, McpTimeoutError
from ..base.http.client import build_http_client
from ..base.log_support import LogContext
from ..base.logging import get_logger, log_event
from ..base.timeouts import get_timeout_config
from ..config.defaults import MCP_CLIENT_NAME, MCP_CLIENT_VERSION, MCP_PROTOCOL_VERSION
from .models import (
    JsonRpcRequest,
    JsonRpcResponse,
    McpServerConfig,
    McpServerStatus,
    McpToolCallResult,
    McpToolDef,
)
from .sse import SseEvent, SseParser

_logger = get_logger("mcp.client")


def _describe(exc: BaseException) -> str:
    if isinstance(exc, AgentError):
        return exc.message
    return str(exc) or type(exc).__name__


class McpState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    INITIALIZING = "initializing"
    CONNECTED = "connected"


def resolve_endpoint(server_url: str, endpoint: str) -> str:
    """Turn the ``endpoint`` event payload into an absolute POST URL.

    Absolute URLs are used as is. Anything else is resolved against the
    origin (scheme, host, port) of ``server_url``.
    """
    endpoint = endpoint.strip()
    if endpoint.startswith(("http://", "https://")):
        return endpoint
    url = httpx.URL(server_url)
    origin = f"{url.scheme}://{url.netloc.decode('ascii')}"
    if endpoint.startswith("/"):
        return origin + endpoint
    return f"{origin}/{endpoint}"


class McpClient:
    """Protocol engine for a single MCP server.

    Args:
        config: Server configuration (URL and headers are used).
        http_client: Optional shared ``httpx.AsyncClient``. When omitted the
            client builds and owns one.
        transport: Transport for the owned client (tests pass
            ``httpx.MockTransport``).
        endpoint_timeout: Seconds to wait for the ``endpoint`` event.
        request_timeout: Seconds to wait for a correlated response.
    """

    def __init__(
        self,
        config: McpServerConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        endpoint_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
    ) -> None:
        timeouts = get_timeout_config()
        self._config = config
        self._endpoint_timeout = (
            timeouts.mcp_endpoint_timeout_seconds if endpoint_timeout is None else endpoint_timeout
        )
        self._request_timeout = timeouts.mcp_request_timeout_seconds if request_timeout is None else request_timeout
        self._owns_http = http_client is None
        if http_client is None:
            http_client = build_http_client(
                timeout=httpx.Timeout(self._request_timeout, connect=timeouts.mcp_connect_timeout_seconds, read=None),
                transport=transport,
            )
        self._http = http_client
        self._ctx = LogContext(server=config.name)

        self._state = McpState.DISCONNECTED
        self._endpoint: Optional[str] = None
        self._endpoint_ready = asyncio.Event()
        self._read_task: Optional[asyncio.Task] = None
        self._pending: Dict[int, asyncio.Future] = {}
        self._request_id = 0
        self._tools: List[McpToolDef] = []
        self._error: Optional[str] = None
        self._last_connected_at: Optional[float] = None
        self._reconnect_lock = asyncio.Lock()

    # ----- views -----
    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> McpServerConfig:
        return self._config

    @property
    def state(self) -> McpState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is McpState.CONNECTED

    @property
    def tools(self) -> List[McpToolDef]:
        return list(self._tools)

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def endpoint(self) -> Optional[str]:
        return self._endpoint

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_status(self) -> McpServerStatus:
        return McpServerStatus(
            name=self._config.name,
            connected=self.connected,
            tool_count=len(self._tools),
            error=self._error,
            last_connected_at=self._last_connected_at,
        )

    # ----- lifecycle -----
    async def connect(self) -> None:
        """Run the connect sequence; no-op when already connected.

        Raises:
            McpError: Transport failure or endpoint timeout.
            McpProtocolError: ``initialize`` answered with an error or a
                malformed ``tools/list`` result.
        """
        if self.connected:
            return
        self._state = McpState.CONNECTING
        log_event(_logger, "mcp.connect_start", self._ctx, url=self._config.url)
        try:
            self._endpoint = None
            self._endpoint_ready = asyncio.Event()
            self._read_task = asyncio.create_task(self._read_stream(), name=f"mcp-sse-{self._config.name}")
            await self._wait_for_endpoint()

            self._state = McpState.INITIALIZING
            init = await self._request(
                "initialize",
                {
                    "protocolVersion": MCP_PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": {"name": MCP_CLIENT_NAME, "version": MCP_CLIENT_VERSION},
                },
            )
            if init.error is not None:
                raise McpProtocolError(
                    f"Initialize failed: {init.error.message}",
                    self._config.name,
                    rpc_code=init.error.code,
                    detail=init.error.data,
                )
            await self._notify("notifications/initialized")

            listing = await self._request("tools/list")
            self._tools = self._parse_tools(listing.result)

            self._state = McpState.CONNECTED
            self._error = None
            self._last_connected_at = time.time()
        except Exception as exc:
            message = _describe(exc)
            await self._teardown(McpDisconnectedError(message, self._config.name))
            self._error = message
            log_event(_logger, "mcp.connect_failed", self._ctx, error=message)
            raise
        log_event(_logger, "mcp.connect_ok", self._ctx, endpoint=self._endpoint, tools=len(self._tools))

    async def disconnect(self) -> None:
        """Stop the stream, fail pending requests and forget the tools."""
        await self._teardown(McpDisconnectedError("Disconnected", self._config.name))
        self._tools = []
        log_event(_logger, "mcp.disconnected", self._ctx)

    async def close(self) -> None:
        await self.disconnect()
        if self._owns_http:
            await self._http.aclose()

    async def _teardown(self, reason: Exception) -> None:
        task, self._read_task = self._read_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._endpoint = None
        self._state = McpState.DISCONNECTED
        self._fail_pending(reason)

    def _fail_pending(self, reason: Exception) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(reason)

    async def _wait_for_endpoint(self) -> None:
        waiter = asyncio.create_task(self._endpoint_ready.wait())
        reader = self._read_task
        try:
            await asyncio.wait(
                {waiter, reader} if reader is not None else {waiter},
                timeout=self._endpoint_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
        if self._endpoint is not None:
            return
        if reader is not None and reader.done():
            raise McpError(self._error or "SSE stream closed before endpoint event", self._config.name)
        raise McpTimeoutError(
            f"No endpoint event within {self._endpoint_timeout:g}s", self._config.name
        )

    # ----- stream -----
    async def _read_stream(self) -> None:
        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache", **self._config.headers}
        parser = SseParser()
        try:
            async with self._http.stream("GET", self._config.url, headers=headers) as response:
                if not response.is_success:
                    raise McpError(f"SSE connection failed: HTTP {response.status_code}", self._config.name)
                async for text in response.aiter_text():
                    for event in parser.feed(text):
                        self._handle_event(event)
        except Exception as exc:  # noqa: BLE001 - recorded as the client error
            message = exc.message if isinstance(exc, McpError) else f"SSE stream error: {_describe(exc)}"
            self._on_stream_closed(message)
            return
        self._on_stream_closed("SSE stream closed")

    def _on_stream_closed(self, message: str) -> None:
        was_connected = self.connected
        self._error = message
        self._endpoint = None
        self._state = McpState.DISCONNECTED
        self._fail_pending(McpDisconnectedError(message, self._config.name))
        log_event(_logger, "mcp.stream_closed", self._ctx, error=message, was_connected=was_connected)

    def _handle_event(self, event: SseEvent) -> None:
        if event.event == "endpoint":
            self._endpoint = resolve_endpoint(self._config.url, event.data)
            self._endpoint_ready.set()
            log_event(_logger, "mcp.endpoint", self._ctx, endpoint=self._endpoint)
        elif event.event == "message":
            self._dispatch_message(event.data)

    def _dispatch_message(self, data: str) -> None:
        if not data.strip():
            return
        try:
            payload = json.loads(data)
        except ValueError as exc:
            log_event(_logger, "mcp.malformed_message", self._ctx, error=str(exc))
            return
        if not isinstance(payload, dict) or "method" in payload:
            # server-initiated requests and notifications are not handled
            return
        request_id = payload.get("id")
        if not isinstance(request_id, int):
            return
        future = self._pending.pop(request_id, None)
        if future is None or future.done():
            return
        try:
            future.set_result(JsonRpcResponse.model_validate(payload))
        except ValidationError as exc:
            future.set_exception(McpProtocolError(f"Malformed JSON-RPC response: {exc}", self._config.name))

    # ----- JSON-RPC -----
    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _request(self, method: str, params: Optional[Dict[str, Any]] = None) -> JsonRpcResponse:
        endpoint = self._endpoint
        if endpoint is None:
            raise McpDisconnectedError("Message endpoint not available", self._config.name)
        request_id = self._next_id()
        request = JsonRpcRequest(id=request_id, method=method, params=params)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        ctx = LogContext(server=self._config.name, request_id=request_id)
        try:
            try:
                response = await self._http.post(endpoint, json=request.to_wire(), headers=self._config.headers)
            except httpx.HTTPError as exc:
                raise McpError(f"{method} failed: {exc}", self._config.name, raw=exc) from exc
            if not response.is_success:
                raise McpError(
                    f"HTTP {response.status_code}: {response.text}",
                    self._config.name,
                    detail={"status": response.status_code},
                )
            direct = self._direct_response(response.text, request_id)
            if direct is not None:
                return direct
            try:
                return await asyncio.wait_for(future, timeout=self._request_timeout)
            except asyncio.TimeoutError:
                log_event(_logger, "mcp.request_timeout", ctx, method=method)
                raise McpTimeoutError(f"Request timeout: {method}", self._config.name) from None
        finally:
            self._pending.pop(request_id, None)

    @staticmethod
    def _direct_response(body: str, request_id: int) -> Optional[JsonRpcResponse]:
        if not body.strip():
            return None
        try:
            payload = json.loads(body)
        except ValueError:
            return None
        if not isinstance(payload, dict) or payload.get("id") != request_id:
            return None
        try:
            return JsonRpcResponse.model_validate(payload)
        except ValidationError:
            return None

    async def _notify(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        endpoint = self._endpoint
        if endpoint is None:
            return
        request = JsonRpcRequest(method=method, params=params)
        try:
            response = await self._http.post(endpoint, json=request.to_wire(), headers=self._config.headers)
        except httpx.HTTPError as exc:
            raise McpError(f"{method} failed: {exc}", self._config.name, raw=exc) from exc
        if not response.is_success:
            log_event(_logger, "mcp.notify_rejected", self._ctx, method=method, status=response.status_code)

    def _parse_tools(self, result: Any) -> List[McpToolDef]:
        if result is None:
            return []
        if not isinstance(result, dict):
            raise McpProtocolError("tools/list result is not an object", self._config.name)
        try:
            return [McpToolDef.model_validate(item) for item in result.get("tools") or []]
        except ValidationError as exc:
            raise McpProtocolError(f"Malformed tools/list result: {exc}", self._config.name) from exc

    # ----- tools -----
    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> McpToolCallResult:
        """Invoke ``tools/call``; failures come back as ``is_error`` results."""
        try:
            return await self._call_tool(name, arguments)
        except Exception as exc:  # noqa: BLE001 - converted to an error result
            if self.connected:
                return McpToolCallResult.error(f"Tool call failed: {_describe(exc)}")
            log_event(_logger, "mcp.reconnect", self._ctx, tool=name, error=_describe(exc))
        try:
            async with self._reconnect_lock:
                # a concurrent caller may have reconnected while this one waited
                if not self.connected:
                    await self.disconnect()
                    await self.connect()
            return await self._call_tool(name, arguments)
        except Exception as exc:  # noqa: BLE001 - converted to an error result
            return McpToolCallResult.error(f"MCP reconnect failed: {_describe(exc)}")

    async def _call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> McpToolCallResult:
        response = await self._request("tools/call", {"name": name, "arguments": arguments or {}})
        if response.error is not None:
            return McpToolCallResult.error(response.error.message)
        if response.result is None:
            return McpToolCallResult.error("Empty response")
        try:
            return McpToolCallResult.model_validate(response.result)
        except ValidationError as exc:
            raise McpProtocolError(f"Malformed tools/call result: {exc}", self._config.name) from exc


__all__ = ["McpClient", "McpState", "resolve_endpoint"]
