from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationError

Role = Literal["user", "assistant"]
ROLES: tuple[str, ...] = ("user", "assistant")


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware UTC datetime.

    Naive values are taken to be UTC. Raises ValidationError when the value
    is empty or is not a real date-time.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = (value or "").strip()
        if not text:
            raise ValidationError("timestamp must not be empty")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(
                f"Invalid timestamp {value!r}. Must be ISO 8601 format"
            ) from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValidationError(f"Timestamp {value!r} is out of range") from exc


def format_timestamp(value: str | datetime) -> str:
    """Canonical stored form: ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    Every stored and compared timestamp goes through this, so lexical order
    in SQLite equals temporal order.
    """
    dt = parse_timestamp(value)
    # strftime("%Y") does not pad years below 1000 on every platform
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}.{dt.microsecond // 1000:03d}Z"
    )


def utc_now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


class ConversationRecord(BaseModel):
    """One stored message of the conversation log."""

    id: int
    role: Role
    content: str
    timestamp: str
    created_at: str


class ConversationQuery(BaseModel):
    """Filter for ConversationStore.query. Unset fields do not filter."""

    keyword: Optional[str] = None
    role: Optional[Role] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    limit: Optional[int] = None


class ConversationStats(BaseModel):
    """Aggregate view over the whole log. Serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    user_messages: int = Field(default=0, alias="userMessages")
    assistant_messages: int = Field(default=0, alias="assistantMessages")
    oldest_timestamp: Optional[str] = Field(default=None, alias="oldestTimestamp")
    newest_timestamp: Optional[str] = Field(default=None, alias="newestTimestamp")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
