"""OpenAI LLM provider implementation for the orchestrator."""

from __future__ import annotations

import json
import os
from typing import Any

from openai import AsyncOpenAI

from ..config import DEFAULT_REQUEST_TIMEOUT
from ..models import Message
from .base import LLMProvider


class OpenAIProvider(LLMProvider):
    """OpenAI-backed LLM provider using the Chat Completions API."""

    def __init__(
        self,
        default_model: str = "gpt-4.1-nano",
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.default_model = default_model
        self.api_key = api_key or os.getenv("OPENAI_API_KEY") or ""
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self.timeout = timeout
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if not self._client:
            kwargs: dict[str, Any] = {"api_key": self.api_key, "timeout": self.timeout}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    @staticmethod
    def _to_openai_messages(messages: list[Message]) -> list[dict[str, Any]]:
        """Convert internal Message objects into OpenAI chat message dicts."""
        out: list[dict[str, Any]] = []
        for m in messages:
            base: dict[str, Any] = {"role": m.role, "content": m.content or ""}
            if m.role == "assistant" and m.tool_calls:
                oa_tool_calls: list[dict[str, Any]] = []
                for tc in m.tool_calls:
                    # Calls with no name are kept so their tool message still has a matching id
                    name = tc.get("name", "") or ""
                    raw_args = tc.get("params") or tc.get("arguments") or {}
                    args_str = raw_args if isinstance(raw_args, str) else json.dumps(raw_args, default=str)
                    oa_tool_calls.append(
                        {
                            "id": tc.get("id") or "",
                            "type": "function",
                            "function": {"name": name, "arguments": args_str},
                        }
                    )
                if oa_tool_calls:
                    base["tool_calls"] = oa_tool_calls
            if m.role == "tool" and m.tool_call_id:
                base["tool_call_id"] = m.tool_call_id
            out.append(base)
        return out

    @staticmethod
    def _parse_tool_calls(choice_message: Any) -> list[dict[str, Any]]:
        """Map OpenAI tool_calls into orchestrator tool_call dicts."""
        tool_calls: list[dict[str, Any]] = []
        for tc in getattr(choice_message, "tool_calls", None) or []:
            fn = getattr(tc, "function", None)
            name = getattr(fn, "name", "") if fn is not None else ""
            raw_args = getattr(fn, "arguments", None) if fn is not None else None
            if isinstance(raw_args, str):
                try:
                    params = json.loads(raw_args) if raw_args else {}
                except json.JSONDecodeError:
                    # Malformed arguments reach the dispatcher, which reports them
                    params = raw_args
            elif isinstance(raw_args, dict):
                params = raw_args
            else:
                params = {}
            tool_calls.append(
                {
                    "id": getattr(tc, "id", "") or "",
                    "name": name or "",
                    "params": params,
                }
            )
        return tool_calls

    async def chat(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> tuple[str, list[dict[str, Any]]]:
        """Non-streaming chat using OpenAI Chat Completions."""
        client = self._get_client()
        params: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": self._to_openai_messages(messages),
            **kwargs,
        }
        if tools:
            params["tools"] = tools

        resp = await client.chat.completions.create(**params)
        if not resp.choices:
            return "", []

        choice = resp.choices[0].message
        return choice.content or "", self._parse_tool_calls(choice)
