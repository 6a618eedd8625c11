"""Shared fixtures for the nyapet_agent test suite.

Fakes:
- ``FakeMcpServer``: an in-process MCP SSE server behind
  ``httpx.MockTransport``. The GET stream is fed from an ``asyncio.Queue`` so
  POST handlers can push ``message`` events to it.
- ``StaticToolProvider``: a ``ToolProvider`` with canned tools and results.
- ``FakeMcpClient``: a connect/close/call_tool double for manager tests.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

import httpx
import pytest

from nyapet_agent.mcp.client import McpClient
from nyapet_agent.mcp.models import McpServerConfig, McpServerStatus, McpToolCallResult, McpToolDef
from nyapet_agent.plugins.storage import InMemoryPluginConfigStorage
from nyapet_agent.plugins.tools import ToolDefinition, ToolResult

SERVER_URL = "http://mcp.test:3001/sse"
MESSAGE_PATH = "/messages?sessionId=abc"


class QueueStream(httpx.AsyncByteStream):
    """Response body fed chunk by chunk; ``None`` ends it, an exception breaks it."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue = asyncio.Queue()

    def push(self, item: Any) -> None:
        self.queue.put_nowait(item)

    async def __aiter__(self):
        while True:
            item = await self.queue.get()
            if item is None:
                return
            if isinstance(item, BaseException):
                raise item
            yield item

    async def aclose(self) -> None:
        return None


class FakeMcpServer:
    """Scriptable MCP server.

    Attributes:
        tools: ``tools/list`` payload; ``None`` answers without a result.
        tool_handlers: name -> callable(arguments) returning text.
        reply_via: ``"sse"`` (responses on the stream) or ``"post"``
            (responses in the POST body).
        drop_methods: methods that never get a response.
        init_error: when set, ``initialize`` answers with this error message.
        sse_status: status code of the GET.
        send_endpoint: whether the stream announces the endpoint.
    """

    def __init__(self) -> None:
        self.tools: Optional[List[Dict[str, Any]]] = [
            {
                "name": "echo",
                "description": "Echo the text back",
                "inputSchema": {"type": "object", "properties": {"text": {"type": "string"}}},
            }
        ]
        self.tool_handlers: Dict[str, Callable[[Dict[str, Any]], str]] = {
            "echo": lambda args: str(args.get("text", "")),
        }
        self.reply_via = "sse"
        self.drop_methods: set = set()
        self.init_error: Optional[str] = None
        self.sse_status = 200
        self.send_endpoint = True
        self.endpoint = MESSAGE_PATH
        self.streams: List[QueueStream] = []
        self.posts: List[Dict[str, Any]] = []
        self.get_headers: List[httpx.Headers] = []
        self.post_urls: List[str] = []

    @property
    def stream(self) -> QueueStream:
        return self.streams[-1]

    @property
    def get_count(self) -> int:
        return len(self.streams)

    def methods(self) -> List[str]:
        return [p.get("method", "") for p in self.posts]

    def close_stream(self) -> None:
        self.stream.push(None)

    def break_stream(self, exc: BaseException) -> None:
        self.stream.push(exc)

    def push_event(self, event: str, data: str) -> None:
        self.stream.push(f"event: {event}\ndata: {data}\n\n".encode())

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return self._open_stream(request)
        self.post_urls.append(str(request.url))
        body = json.loads(request.content)
        self.posts.append(body)
        if "id" not in body:
            return httpx.Response(202, text="Accepted")
        reply = self._reply(body)
        if reply is None:
            return httpx.Response(202, text="Accepted")
        if self.reply_via == "post":
            return httpx.Response(200, json=reply)
        self.push_event("message", json.dumps(reply))
        return httpx.Response(202, text="Accepted")

    def _open_stream(self, request: httpx.Request) -> httpx.Response:
        self.get_headers.append(request.headers)
        stream = QueueStream()
        self.streams.append(stream)
        if self.sse_status != 200:
            stream.push(None)
            return httpx.Response(self.sse_status, stream=stream)
        if self.send_endpoint:
            stream.push(f"event: endpoint\ndata: {self.endpoint}\n\n".encode())
        return httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=stream)

    def _reply(self, body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        method = body.get("method")
        if method in self.drop_methods:
            return None
        rid = body["id"]
        if method == "initialize":
            if self.init_error:
                return {"jsonrpc": "2.0", "id": rid, "error": {"code": -32603, "message": self.init_error}}
            return {
                "jsonrpc": "2.0",
                "id": rid,
                "result": {
                    "protocolVersion": body["params"]["protocolVersion"],
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": "fake", "version": "0.0.1"},
                },
            }
        if method == "tools/list":
            if self.tools is None:
                return {"jsonrpc": "2.0", "id": rid}
            return {"jsonrpc": "2.0", "id": rid, "result": {"tools": self.tools}}
        if method == "tools/call":
            name = body["params"]["name"]
            handler = self.tool_handlers.get(name)
            if handler is None:
                return {"jsonrpc": "2.0", "id": rid, "error": {"code": -32602, "message": f"Unknown tool: {name}"}}
            text = handler(body["params"].get("arguments") or {})
            return {"jsonrpc": "2.0", "id": rid, "result": {"content": [{"type": "text", "text": text}], "isError": False}}
        return {"jsonrpc": "2.0", "id": rid, "error": {"code": -32601, "message": "Method not found"}}


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` on the event loop until it holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture()
def mcp_server() -> FakeMcpServer:
    return FakeMcpServer()


@pytest.fixture()
def mcp_server_cls():
    return FakeMcpServer


@pytest.fixture()
def mcp_config() -> McpServerConfig:
    return McpServerConfig(name="fake", url=SERVER_URL, headers={"Authorization": "Bearer t0ken"})


@pytest.fixture()
async def make_mcp_client(mcp_server: FakeMcpServer, mcp_config: McpServerConfig):
    """Factory building clients bound to the fake server; closes them afterwards."""
    created: List[McpClient] = []

    def factory(config: Optional[McpServerConfig] = None, **kwargs: Any) -> McpClient:
        kwargs.setdefault("endpoint_timeout", 1.0)
        kwargs.setdefault("request_timeout", 1.0)
        client = McpClient(config or mcp_config, transport=mcp_server.transport(), **kwargs)
        created.append(client)
        return client

    yield factory
    for client in created:
        await client.close()


@pytest.fixture()
def waiter() -> Callable[..., Awaitable[None]]:
    return wait_until


class StaticToolProvider:
    """``ToolProvider`` with canned tools; records every call."""

    def __init__(
        self,
        provider_id: str,
        tools: List[str],
        results: Optional[Dict[str, Any]] = None,
        fail_with: Optional[Exception] = None,
    ) -> None:
        self._id = provider_id
        self._tools = [ToolDefinition(name=name, description=f"{name} from {provider_id}") for name in tools]
        self.results = results or {}
        self.fail_with = fail_with
        self.enabled = True
        self.calls: List[tuple] = []

    @property
    def provider_id(self) -> str:
        return self._id

    @property
    def provider_name(self) -> str:
        return self._id.title()

    def get_tools(self) -> List[ToolDefinition]:
        return list(self._tools)

    async def execute_tool(self, name: str, arguments: Dict[str, Any]) -> ToolResult:
        self.calls.append((name, arguments))
        if self.fail_with is not None:
            raise self.fail_with
        return ToolResult.ok(self.results.get(name, f"{self._id}:{name}"))


@pytest.fixture()
def tool_provider_cls():
    return StaticToolProvider


@pytest.fixture()
def plugin_storage() -> InMemoryPluginConfigStorage:
    return InMemoryPluginConfigStorage()


class FakeMcpClient:
    """Stand-in for :class:`McpClient` used by manager tests."""

    def __init__(self, config: McpServerConfig, fail: bool = False, delay: float = 0.0) -> None:
        self.config = config
        self.fail = fail
        self.delay = delay
        self.connected = False
        self.closed = False
        self.error: Optional[str] = None
        self.tools: List[McpToolDef] = []

    async def connect(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            self.error = f"cannot reach {self.config.url}"
            raise ConnectionError(self.error)
        self.connected = True
        self.tools = [McpToolDef(name=f"{self.config.name}_tool", description="fake")]

    async def close(self) -> None:
        self.closed = True
        self.connected = False
        self.tools = []

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> McpToolCallResult:
        return McpToolCallResult.model_validate({"content": [{"type": "text", "text": f"{name} ok"}]})

    def get_status(self) -> McpServerStatus:
        return McpServerStatus(name=self.config.name, connected=self.connected, tool_count=len(self.tools))


@pytest.fixture()
def fake_client_factory() -> Iterator[Callable[..., Any]]:
    """Factory recording created fake clients.

    Names in ``failing`` fail to connect; ``delays`` maps names to a connect delay.
    """
    created: List[FakeMcpClient] = []
    failing: set = set()
    delays: Dict[str, float] = {}

    def factory(config: McpServerConfig) -> FakeMcpClient:
        client = FakeMcpClient(config, fail=config.name in failing, delay=delays.get(config.name, 0.0))
        created.append(client)
        return client

    factory.created = created  # type: ignore[attr-defined]
    factory.failing = failing  # type: ignore[attr-defined]
    factory.delays = delays  # type: ignore[attr-defined]
    yield factory
