"""Request-scoped access to the shared store handle and dispatcher."""

from __future__ import annotations

from fastapi import Request

from src.agent_orchestrator.dispatcher import ToolDispatcher
from src.agent_orchestrator.providers import LLMProvider


def get_dispatcher(request: Request) -> ToolDispatcher:
    return request.app.state.dispatcher


def get_llm_provider(request: Request) -> LLMProvider | None:
    return getattr(request.app.state, "llm_provider", None)
