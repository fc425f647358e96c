"""Abstract LLM provider interface for the agent orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..models import Message


class LLMProvider(ABC):
    """
    Abstract LLM provider. Implement this to plug in any backend (Anthropic, OpenAI, Ollama, ...).

    The orchestrator only depends on this interface.
    """

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> tuple[str, list[dict[str, Any]]]:
        """
        Non-streaming chat. Returns (content, tool_calls).

        messages: may contain "system", "user", "assistant" (optionally with
        tool_calls) and "tool" messages (tool_call_id set).
        tools: function-calling schemas ({"type": "function", "function": {...}}).
        tool_calls: list of {"id", "name", "params"}.
        """
        ...
