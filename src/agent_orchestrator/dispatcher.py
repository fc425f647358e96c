"""Tool dispatcher: validates a named invocation and runs it against the store."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import pydantic

from src.conversation_memory import ConversationStore

from .errors import DispatchError, PersistenceError, ValidationError
from .models import ToolDef, ToolResult
from .tools import TOOLS, BaseTool

logger = logging.getLogger(__name__)


def describe_validation_error(tool_name: str, exc: pydantic.ValidationError) -> str:
    """One line naming every invalid field, e.g. ``role: Input should be 'user' or 'assistant'``."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return f"Invalid arguments for {tool_name}: " + "; ".join(parts)


class ToolDispatcher:
    """Routes tool invocations by name to the registered tools.

    ``dispatch`` never raises: unknown tools, invalid arguments and storage
    failures all come back as failure results.
    """

    def __init__(self, store: ConversationStore, tools: Iterable[BaseTool] | None = None) -> None:
        self.store = store
        self._tools: dict[str, BaseTool] = {t.name: t for t in (tools if tools is not None else TOOLS)}

    def list_tools(self) -> list[ToolDef]:
        return [t.to_def() for t in self._tools.values()]

    def tool_schemas(self) -> list[dict[str, Any]]:
        return [t.to_tool_schema() for t in self._tools.values()]

    async def dispatch(self, name: str, args: Any = None) -> ToolResult:
        try:
            tool = self._tools.get(name)
            if tool is None:
                raise DispatchError(name)
            if args is None:
                args = {}
            if not isinstance(args, dict):
                return ToolResult.fail(f"Invalid arguments for {name}: arguments must be an object")
            try:
                params = tool.input_model.model_validate(args)
            except pydantic.ValidationError as exc:
                return ToolResult.fail(describe_validation_error(name, exc))
            return await tool.execute(self.store, params)
        except DispatchError as exc:
            logger.warning("Rejected unknown tool %r", name)
            return ToolResult.fail(str(exc))
        except ValidationError as exc:
            return ToolResult.fail(str(exc))
        except PersistenceError as exc:
            logger.warning("Tool %s failed on storage: %s", name, exc)
            return ToolResult.fail(str(exc))
        except Exception as exc:
            logger.exception("Tool %s raised unexpectedly", name)
            return ToolResult.fail(str(exc) or exc.__class__.__name__)
