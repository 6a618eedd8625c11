"""Structured logging context object.

:class:`LogContext` carries the fields shared by most runtime events
(provider, model, MCP server, request id) plus a free-form ``extra`` mapping.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for runtime logging events."""

    provider: Optional[str] = None
    model: Optional[str] = None
    server: Optional[str] = None
    request_id: Optional[int | str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
