"""Main agent-tool loop orchestrator."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from src.conversation_memory import ConversationStore

from .config import DEFAULT_MAX_TOOL_ITERATIONS, DEFAULT_MODEL, FALLBACK_REPLY
from .dispatcher import ToolDispatcher
from .errors import UpstreamError
from .llm import chat
from .models import Message, ToolCall, ToolResult
from .providers import LLMProvider
from .system_prompt_loader import build_system_prompt

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    INIT = "init"
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"


@dataclass
class LoopOptions:
    """Options for the agent loop."""

    model: str = DEFAULT_MODEL
    max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS
    system_prompt: str | None = None
    llm_provider: LLMProvider | None = None
    # When False the caller is expected to run persist_turn itself (e.g. as a background task)
    persist_turn: bool = True


@dataclass
class TurnResult:
    """Outcome of one turn."""

    reply: str
    timestamp: str
    rounds: int = 0
    hit_iteration_cap: bool = False
    tool_calls: list[ToolCall] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)


class AgentLoop:
    """
    Drives one turn: model round → execute requested tools → repeat, until the
    model answers without tools or ``max_tool_iterations`` tool rounds ran.

    Tool calls of a round run one after another in the requested order and a
    failing call never stops its siblings. Persistence of the turn happens
    once, after the answer is known, and its failures are only logged.
    """

    def __init__(self, dispatcher: ToolDispatcher, options: LoopOptions | None = None) -> None:
        self.dispatcher = dispatcher
        self.options = options or LoopOptions()

    async def run(self, user_message: str, history: list[Message] | None = None) -> TurnResult:
        opts = self.options
        now = datetime.now(timezone.utc)
        turn_timestamp = now.isoformat()
        tool_schemas = self.dispatcher.tool_schemas()

        state = LoopState.INIT
        rounds = 0
        hit_cap = False
        text_parts: list[str] = []
        pending: list[ToolCall] = []
        executed: list[ToolCall] = []
        messages: list[Message] = []

        while state is not LoopState.DONE:
            if state is LoopState.INIT:
                messages.append(
                    Message(role="system", content=build_system_prompt(opts.system_prompt, now))
                )
                messages.extend(m for m in (history or []) if m.role in ("user", "assistant"))
                messages.append(Message(role="user", content=user_message))
                state = LoopState.AWAITING_MODEL

            elif state is LoopState.AWAITING_MODEL:
                try:
                    content, raw_calls = await chat(
                        messages,
                        model=opts.model,
                        tools=tool_schemas,
                        provider=opts.llm_provider,
                    )
                except UpstreamError:
                    logger.error("Model call failed in round %d", rounds)
                    raise
                if content and content.strip():
                    text_parts.append(content.strip())
                calls = [ToolCall.from_dict(tc, fallback_id=str(uuid.uuid4())) for tc in raw_calls or []]

                if not calls:
                    messages.append(Message(role="assistant", content=content or ""))
                    state = LoopState.DONE
                elif rounds >= opts.max_tool_iterations:
                    logger.warning(
                        "Stopping after %d tool rounds; %d requested call(s) not executed",
                        rounds,
                        len(calls),
                    )
                    hit_cap = True
                    state = LoopState.DONE
                else:
                    messages.append(
                        Message(
                            role="assistant",
                            content=content or "",
                            tool_calls=[c.to_dict() for c in calls],
                        )
                    )
                    pending = calls
                    state = LoopState.EXECUTING_TOOLS

            elif state is LoopState.EXECUTING_TOOLS:
                messages.extend(await self._execute_tools(pending, rounds))
                executed.extend(pending)
                pending = []
                rounds += 1
                state = LoopState.AWAITING_MODEL

        reply = "\n".join(text_parts).strip() or FALLBACK_REPLY
        result = TurnResult(
            reply=reply,
            timestamp=turn_timestamp,
            rounds=rounds,
            hit_iteration_cap=hit_cap,
            tool_calls=executed,
            messages=messages,
        )
        if opts.persist_turn:
            await self.persist_turn(user_message, reply, turn_timestamp)
        return result

    async def _execute_tools(self, calls: list[ToolCall], round_index: int) -> list[Message]:
        """Run each call in order; every call yields exactly one tool message."""
        out: list[Message] = []
        for call in calls:
            logger.info("Executing tool %s (call %s, round %d)", call.name, call.id, round_index)
            try:
                result = await self.dispatcher.dispatch(call.name, call.params)
            except Exception as exc:
                logger.exception("Tool %s raised", call.name)
                result = ToolResult.fail(str(exc) or exc.__class__.__name__)
            if not result.success:
                logger.warning("Tool %s failed: %s", call.name, result.error)
            out.append(
                Message(
                    role="tool",
                    content=result.to_content(),
                    tool_call_id=call.id,
                    name=call.name,
                    is_error=not result.success,
                )
            )
        return out

    async def persist_turn(self, user_message: str, reply: str, timestamp: str) -> None:
        """Store the user message and the reply. Failures are logged, never raised."""
        for role, content in (("user", user_message), ("assistant", reply)):
            try:
                result = await self.dispatcher.dispatch(
                    "store_conversation",
                    {"role": role, "content": content, "timestamp": timestamp},
                )
            except Exception:
                logger.exception("Error storing %s message", role)
                continue
            if not result.success:
                logger.warning("Could not store %s message: %s", role, result.error)


async def run_loop(
    user_message: str,
    store: ConversationStore,
    history: list[Message] | None = None,
    options: LoopOptions | None = None,
) -> TurnResult:
    """Run one turn against ``store`` with the default tool set."""
    return await AgentLoop(ToolDispatcher(store), options).run(user_message, history)
