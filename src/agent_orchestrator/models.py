"""Data models for messages and tools."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single message in the model's working context."""

    role: str  # "system" | "user" | "assistant" | "tool"
    content: str = ""
    tool_calls: list[dict[str, Any]] | None = None
    tool_call_id: str | None = None
    name: str | None = None
    is_error: bool = False

    def to_chat_dict(self) -> dict[str, Any]:
        """Format for LLM chat API."""
        out: dict[str, Any] = {"role": self.role, "content": self.content or ""}
        if self.tool_calls is not None:
            out["tool_calls"] = self.tool_calls
        if self.tool_call_id is not None:
            out["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            out["name"] = self.name
        return out


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@dataclass
class ToolCall:
    """One tool invocation requested by the model."""

    id: str
    name: str
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any], fallback_id: str) -> ToolCall:
        """Accept the provider shape {"id", "name", "params" | "arguments"}."""
        params = raw.get("params")
        if params is None:
            params = raw.get("arguments")
        if params is None:
            params = {}
        return cls(id=raw.get("id") or fallback_id, name=raw.get("name") or "", params=params)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "params": self.params}


@dataclass
class ToolResult:
    """Outcome of one tool execution: success payload or failure message."""

    success: bool
    payload: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def ok(cls, **payload: Any) -> ToolResult:
        return cls(success=True, payload=payload)

    @classmethod
    def fail(cls, error: str) -> ToolResult:
        return cls(success=False, error=error)

    def to_envelope(self) -> dict[str, Any]:
        """The wire envelope: always ``success``, plus payload or ``error``."""
        if self.success:
            return {"success": True, **self.payload}
        return {"success": False, "error": self.error or "Unknown error"}

    def to_content(self) -> str:
        return json.dumps(self.to_envelope(), default=str)


@dataclass
class ToolDef:
    """Tool definition advertised to the LLM."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON Schema

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema (OpenAI-style) for any LLM provider."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_listing(self) -> dict[str, Any]:
        """Capability-discovery shape: name, description, input_schema."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }
