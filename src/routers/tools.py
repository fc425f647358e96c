"""Tools router: capability discovery and direct tool calls."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.agent_orchestrator.dispatcher import ToolDispatcher

from .dependencies import get_dispatcher

router = APIRouter(prefix="/tools", tags=["tools"])


class ToolCallRequest(BaseModel):
    """Request body for POST /tools/call."""

    name: str = Field(..., description="Registered tool name")
    arguments: dict[str, Any] = Field(default_factory=dict)


@router.get("")
async def list_tools(dispatcher: ToolDispatcher = Depends(get_dispatcher)) -> dict[str, Any]:
    """Registered tools in registry order."""
    return {"tools": [t.to_listing() for t in dispatcher.list_tools()]}


@router.post("/call")
async def call_tool(
    request: ToolCallRequest,
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    """Run one tool. Failures come back in the envelope, never as HTTP errors."""
    result = await dispatcher.dispatch(request.name, request.arguments)
    return result.to_envelope()
