"""Agent orchestrator: bounded LLM-tool loop over the conversation memory tools."""

from .dispatcher import ToolDispatcher
from .errors import DispatchError, PersistenceError, UpstreamError, ValidationError
from .loop import AgentLoop, LoopOptions, LoopState, TurnResult, run_loop
from .models import Message, ToolCall, ToolDef, ToolResult
from .providers import AnthropicProvider, LLMProvider, OllamaProvider, OpenAIProvider
from .tools import TOOLS, list_tools

__all__ = [
    "AgentLoop",
    "LoopOptions",
    "LoopState",
    "TurnResult",
    "run_loop",
    "ToolDispatcher",
    "TOOLS",
    "list_tools",
    "Message",
    "ToolCall",
    "ToolDef",
    "ToolResult",
    "DispatchError",
    "PersistenceError",
    "UpstreamError",
    "ValidationError",
    "LLMProvider",
    "AnthropicProvider",
    "OllamaProvider",
    "OpenAIProvider",
]
