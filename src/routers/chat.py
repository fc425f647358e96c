"""Chat router: agent loop endpoint."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field

from src.agent_orchestrator.config import DEFAULT_MODEL
from src.agent_orchestrator.dispatcher import ToolDispatcher
from src.agent_orchestrator.errors import UpstreamError
from src.agent_orchestrator.loop import AgentLoop, LoopOptions
from src.agent_orchestrator.models import Message
from src.agent_orchestrator.providers import LLMProvider

from .dependencies import get_dispatcher, get_llm_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


class HistoryMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    message: str = Field(..., min_length=1, description="User message")
    history: list[HistoryMessage] = Field(
        default_factory=list, description="Prior turns of this conversation, oldest first"
    )
    system_prompt: str | None = Field(None, description="Optional system prompt")
    model: str = Field(
        DEFAULT_MODEL,
        description=(
            "LLM model in 'provider:model' format (e.g. 'anthropic:claude-3-5-sonnet-20241022', "
            "'openai:gpt-4.1-nano'). If no ':' is present, the value is "
            "treated as an Ollama model name."
        ),
    )


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    reply: str
    rounds: int = 0
    tool_calls: list[str] = Field(default_factory=list)


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    background_tasks: BackgroundTasks,
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
    provider: LLMProvider | None = Depends(get_llm_provider),
) -> ChatResponse:
    """Run the agent loop and return the assistant reply. The turn is stored in a background task after the response is sent."""
    user_message = request.message.strip()
    if not user_message:
        raise HTTPException(status_code=422, detail="message must not be blank")
    opts = LoopOptions(
        model=request.model,
        system_prompt=request.system_prompt,
        llm_provider=provider,
        persist_turn=False,
    )
    loop = AgentLoop(dispatcher, opts)
    history = [Message(role=m.role, content=m.content) for m in request.history]
    try:
        result = await loop.run(user_message, history)
    except UpstreamError as e:
        logger.error("Chat turn failed: %s", e)
        raise HTTPException(status_code=502, detail="The model is unavailable, please try again.") from e
    background_tasks.add_task(loop.persist_turn, user_message, result.reply, result.timestamp)
    return ChatResponse(
        reply=result.reply,
        rounds=result.rounds,
        tool_calls=[c.name for c in result.tool_calls],
    )
