"""Error taxonomy for the agent loop and tool protocol."""

from __future__ import annotations

from src.conversation_memory.errors import PersistenceError, ValidationError


class DispatchError(Exception):
    """A tool invocation named a tool that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class UpstreamError(Exception):
    """The model call failed; fatal for the current turn."""


__all__ = ["DispatchError", "PersistenceError", "UpstreamError", "ValidationError"]
