"""Incremental Server-Sent Events parser.

Only the fields the MCP SSE transport uses are interpreted (``event`` and
``data``); ``id``/``retry`` and unknown fields are ignored, lines starting
with ``:`` are comments. A blank line dispatches the accumulated event.
Input may arrive in arbitrary chunks; CR, LF and CRLF line endings are
accepted, including a CRLF split across two chunks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

DEFAULT_EVENT = "message"


@dataclass(frozen=True)
class SseEvent:
    event: str
    data: str


class SseParser:
    def __init__(self) -> None:
        self._buffer = ""
        self._event: Optional[str] = None
        self._data: List[str] = []

    def feed(self, chunk: str) -> List[SseEvent]:
        """Consume ``chunk`` and return the events it completed."""
        buf = self._buffer + chunk
        hold = ""
        if buf.endswith("\r"):
            buf, hold = buf[:-1], "\r"
        buf = buf.replace("\r\n", "\n").replace("\r", "\n")
        *lines, rest = buf.split("\n")
        self._buffer = rest + hold
        events: List[SseEvent] = []
        for line in lines:
            event = self._line(line)
            if event is not None:
                events.append(event)
        return events

    def _line(self, line: str) -> Optional[SseEvent]:
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None
        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if name == "event":
            self._event = value
        elif name == "data":
            self._data.append(value)
        return None

    def _dispatch(self) -> Optional[SseEvent]:
        if self._event is None and not self._data:
            return None
        event = SseEvent(self._event or DEFAULT_EVENT, "\n".join(self._data))
        self._event = None
        self._data = []
        return event

    def reset(self) -> None:
        self._buffer = ""
        self._event = None
        self._data = []


__all__ = ["SseEvent", "SseParser", "DEFAULT_EVENT"]
