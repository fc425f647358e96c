"""Ollama LLM provider implementation."""

from __future__ import annotations

import json
import os
import uuid
from typing import Any

from ollama import AsyncClient

from ..config import DEFAULT_REQUEST_TIMEOUT
from ..models import Message
from .base import LLMProvider


def _message_to_chat(m: Message) -> dict[str, Any]:
    """Convert our Message to Ollama chat format."""
    out: dict[str, Any] = {"role": m.role, "content": m.content or ""}
    if m.tool_calls:
        out["tool_calls"] = [
            {
                "function": {
                    "name": tc.get("name", ""),
                    "arguments": tc.get("params") or tc.get("arguments") or {},
                },
            }
            for tc in m.tool_calls
        ]
    if m.role == "tool" and m.name:
        out["tool_name"] = m.name
    return out


class OllamaProvider(LLMProvider):
    """Ollama-backed LLM provider for locally served models."""

    def __init__(
        self,
        default_model: str = "llama3.2",
        base_url: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.default_model = default_model
        self.base_url = base_url or os.getenv("OLLAMA_HOST") or "http://localhost:11434"
        self.timeout = timeout

    @staticmethod
    def _parse_tool_calls(msg: Any) -> list[dict[str, Any]]:
        """Ollama does not issue call ids, so each call gets a fresh uuid."""
        tool_calls: list[dict[str, Any]] = []
        for tc in getattr(msg, "tool_calls", None) or []:
            fn = getattr(tc, "function", None)
            if fn is None:
                continue
            args = getattr(fn, "arguments", None)
            if isinstance(args, str):
                try:
                    args = json.loads(args)
                except json.JSONDecodeError:
                    pass
            tool_calls.append({
                "id": str(uuid.uuid4()),
                "name": getattr(fn, "name", "") or "",
                "params": args if args is not None else {},
            })
        return tool_calls

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> tuple[str, list[dict[str, Any]]]:
        client = AsyncClient(host=self.base_url, timeout=self.timeout)
        resp = await client.chat(
            model=model or self.default_model,
            messages=[_message_to_chat(m) for m in messages],
            tools=tools or None,
            stream=False,
            **kwargs,
        )
        msg = getattr(resp, "message", None)
        if msg is None:
            return "", []
        return getattr(msg, "content", None) or "", self._parse_tool_calls(msg)
