"""Anthropic (Claude) LLM provider implementation for the orchestrator."""

from __future__ import annotations

import json
import os
from typing import Any

from anthropic import AsyncAnthropic

from ..config import DEFAULT_MAX_TOKENS, DEFAULT_REQUEST_TIMEOUT
from ..models import Message
from .base import LLMProvider


class AnthropicProvider(LLMProvider):
    """Claude provider using the Messages API with tool_use / tool_result blocks."""

    def __init__(
        self,
        default_model: str = "claude-3-5-sonnet-20241022",
        api_key: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.default_model = default_model
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY") or ""
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client: AsyncAnthropic | None = None

    def _get_client(self) -> AsyncAnthropic:
        if not self._client:
            self._client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    @staticmethod
    def _to_anthropic_messages(messages: list[Message]) -> tuple[list[dict[str, Any]], str | None]:
        """Convert internal messages into Anthropic messages plus the system prompt.

        Consecutive tool messages are merged into one user turn of
        tool_result blocks, which is what the API expects after a tool_use turn.
        """
        out: list[dict[str, Any]] = []
        system_parts: list[str] = []
        for m in messages:
            if m.role == "system":
                if m.content:
                    system_parts.append(m.content)
                continue
            if m.role == "tool":
                block = {
                    "type": "tool_result",
                    "tool_use_id": m.tool_call_id or "",
                    "content": m.content or "",
                }
                if m.is_error:
                    block["is_error"] = True
                prev = out[-1] if out else None
                if (
                    prev is not None
                    and prev["role"] == "user"
                    and isinstance(prev["content"], list)
                    and all(b.get("type") == "tool_result" for b in prev["content"])
                ):
                    prev["content"].append(block)
                else:
                    out.append({"role": "user", "content": [block]})
                continue
            if m.role == "assistant" and m.tool_calls:
                blocks: list[dict[str, Any]] = []
                if m.content:
                    blocks.append({"type": "text", "text": m.content})
                for tc in m.tool_calls:
                    raw_args = tc.get("params") or tc.get("arguments") or {}
                    if isinstance(raw_args, str):
                        try:
                            raw_args = json.loads(raw_args)
                        except json.JSONDecodeError:
                            raw_args = {}
                    blocks.append(
                        {
                            "type": "tool_use",
                            "id": tc.get("id") or "",
                            "name": tc.get("name") or "",
                            "input": raw_args,
                        }
                    )
                out.append({"role": "assistant", "content": blocks})
                continue
            out.append({"role": m.role, "content": m.content or ""})
        system = "\n\n".join(system_parts) or None
        return out, system

    @staticmethod
    def _to_anthropic_tools(tools: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
        """Convert function-calling schemas into Anthropic tool definitions."""
        out: list[dict[str, Any]] = []
        for t in tools or []:
            fn = t.get("function") if "function" in t else t
            name = fn.get("name")
            if not name:
                continue
            out.append(
                {
                    "name": name,
                    "description": fn.get("description", ""),
                    "input_schema": fn.get("parameters") or {"type": "object", "properties": {}},
                }
            )
        return out

    @staticmethod
    def _parse_content(content: Any) -> tuple[str, list[dict[str, Any]]]:
        """Split response blocks into joined text and orchestrator tool_call dicts."""
        texts: list[str] = []
        tool_calls: list[dict[str, Any]] = []
        for block in content or []:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                texts.append(getattr(block, "text", "") or "")
            elif block_type == "tool_use":
                params = getattr(block, "input", None)
                tool_calls.append(
                    {
                        "id": getattr(block, "id", "") or "",
                        "name": getattr(block, "name", "") or "",
                        "params": params if isinstance(params, dict) else {},
                    }
                )
        return "\n".join(t for t in texts if t), tool_calls

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> tuple[str, list[dict[str, Any]]]:
        """Non-streaming chat using messages.create."""
        client = self._get_client()
        anthropic_messages, system = self._to_anthropic_messages(messages)

        params: dict[str, Any] = {
            "model": model or self.default_model,
            "max_tokens": kwargs.pop("max_tokens", self.max_tokens),
            "messages": anthropic_messages,
            **kwargs,
        }
        if system:
            params["system"] = system
        anthropic_tools = self._to_anthropic_tools(tools)
        if anthropic_tools:
            params["tools"] = anthropic_tools

        resp = await client.messages.create(**params)
        return self._parse_content(resp.content)
