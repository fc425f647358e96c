"""Tool protocol and the conversation memory tools advertised to the model."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from src.conversation_memory import ConversationQuery, ConversationStore
from src.conversation_memory.models import ROLES, Role, parse_timestamp

from .models import ToolDef, ToolResult


class BaseTool(ABC):
    """Base class for orchestrator tools.

    A tool only declares its shape; it is executed by the dispatcher, which
    validates arguments with ``input_model`` and hands over the store.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for parameters."""
        ...

    @property
    @abstractmethod
    def input_model(self) -> type[BaseModel]:
        """Pydantic model enforcing the same shape as ``parameters``."""
        ...

    @abstractmethod
    async def execute(self, store: ConversationStore, params: BaseModel) -> ToolResult:
        ...

    def to_def(self) -> ToolDef:
        return ToolDef(name=self.name, description=self.description, parameters=self.parameters)

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema for any LLM provider."""
        return self.to_def().to_tool_schema()


# ---------------------------------------------------------------------------
# Validated inputs
# ---------------------------------------------------------------------------


def _check_timestamp(value: Optional[str]) -> Optional[str]:
    if value is not None:
        parse_timestamp(value)
    return value


Timestamp = Annotated[str, Field(min_length=1), AfterValidator(_check_timestamp)]
OptionalTimestamp = Annotated[Optional[str], AfterValidator(_check_timestamp)]


class StoreConversationInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Role
    content: str = Field(min_length=1)
    timestamp: Timestamp


class RetrieveConversationsInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    keyword: Optional[str] = None
    role: Optional[Role] = None
    start_time: OptionalTimestamp = None
    end_time: OptionalTimestamp = None
    limit: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="before")
    @classmethod
    def blank_means_unset(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: (None if v == "" else v) for k, v in data.items()}
        return data

    def to_query(self) -> ConversationQuery:
        return ConversationQuery(**self.model_dump())


class GetStatsInput(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class StoreConversationTool(BaseTool):
    """Append one user or assistant message to the conversation log."""

    @property
    def name(self) -> str:
        return "store_conversation"

    @property
    def description(self) -> str:
        return "Store a conversation message (user or assistant) with timestamp"

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "role": {
                    "type": "string",
                    "enum": list(ROLES),
                    "description": "The role of the message sender",
                },
                "content": {
                    "type": "string",
                    "description": "The content of the message",
                },
                "timestamp": {
                    "type": "string",
                    "description": "ISO 8601 timestamp of when the message was created",
                },
            },
            "required": ["role", "content", "timestamp"],
        }

    @property
    def input_model(self) -> type[BaseModel]:
        return StoreConversationInput

    async def execute(self, store: ConversationStore, params: BaseModel) -> ToolResult:
        message_id = await asyncio.to_thread(
            store.store, params.role, params.content, params.timestamp
        )
        return ToolResult.ok(id=message_id, message="Conversation stored successfully")


class RetrieveConversationsTool(BaseTool):
    """Search the log by keyword, role and time range, newest first."""

    @property
    def name(self) -> str:
        return "retrieve_conversations"

    @property
    def description(self) -> str:
        return "Retrieve past conversations based on search criteria. All parameters are optional."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "keyword": {
                    "type": "string",
                    "description": "Search for messages containing this keyword (case-insensitive)",
                },
                "role": {
                    "type": "string",
                    "enum": list(ROLES),
                    "description": "Filter by message role",
                },
                "start_time": {
                    "type": "string",
                    "description": "ISO 8601 timestamp - only return messages at or after this time",
                },
                "end_time": {
                    "type": "string",
                    "description": "ISO 8601 timestamp - only return messages at or before this time",
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of messages to return (default: no limit)",
                    "minimum": 1,
                },
            },
            "required": [],
        }

    @property
    def input_model(self) -> type[BaseModel]:
        return RetrieveConversationsInput

    async def execute(self, store: ConversationStore, params: BaseModel) -> ToolResult:
        records = await asyncio.to_thread(store.query, params.to_query())
        return ToolResult.ok(
            count=len(records),
            conversations=[r.model_dump() for r in records],
        )


class GetStatsTool(BaseTool):
    """Totals per role and the oldest/newest timestamps."""

    @property
    def name(self) -> str:
        return "get_stats"

    @property
    def description(self) -> str:
        return "Get statistics about stored conversations"

    @property
    def parameters(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    @property
    def input_model(self) -> type[BaseModel]:
        return GetStatsInput

    async def execute(self, store: ConversationStore, params: BaseModel) -> ToolResult:
        stats = await asyncio.to_thread(store.stats)
        return ToolResult.ok(stats=stats.to_wire())


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

TOOLS: tuple[BaseTool, ...] = (
    StoreConversationTool(),
    RetrieveConversationsTool(),
    GetStatsTool(),
)


def list_tools() -> list[ToolDef]:
    """Ordered tool descriptors; cheap and side-effect free."""
    return [t.to_def() for t in TOOLS]
