"""HTTP utilities package.

Exposes the shared ``httpx.AsyncClient`` builder used by providers and MCP
clients.
"""

from .client import build_http_client

__all__ = ["build_http_client"]
