"""Tool definition and tool result DTOs.

These shapes are provider-agnostic: in-process plugins and MCP bridges both
describe their tools with :class:`ToolDefinition` and answer calls with
:class:`ToolResult`. The LLM-facing schema is ``{name, description,
parameters}``; vendor function formats are produced by each LLM provider.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolDefinition(BaseModel):
    """A callable, schema-described capability.

    Attributes:
        name: Tool name, resolved first-match across providers at call time.
        description: Human/LLM readable description.
        parameters: JSON schema object for the arguments, or ``None``.
        require_confirm: Ask the user before executing.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    parameters: Optional[Dict[str, Any]] = None
    require_confirm: bool = False

    def to_schema(self) -> Dict[str, Any]:
        """Return the provider-agnostic schema exported to LLMs."""
        return {"name": self.name, "description": self.description, "parameters": self.parameters}


class ToolResult(BaseModel):
    """Result envelope of a tool invocation.

    ``result`` is meaningful when ``success`` is true, ``error`` otherwise.
    """

    success: bool
    result: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, result: Any = None) -> "ToolResult":
        return cls(success=True, result=result)

    @classmethod
    def fail(cls, error: str) -> "ToolResult":
        return cls(success=False, error=error)

    def to_text(self) -> str:
        """Render the result as text for a ``tool`` chat message."""
        if not self.success:
            return f"Error: {self.error or 'unknown error'}"
        if self.result is None:
            return ""
        if isinstance(self.result, str):
            return self.result
        return json.dumps(self.result, ensure_ascii=False, default=str)


__all__ = ["ToolDefinition", "ToolResult"]
