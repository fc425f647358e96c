from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

# Align with main_config: conversation data under BASE_DIR/db/
try:
    from main_config import CONVERSATIONS_DB_PATH as _DB_PATH_STR

    SQLITE_PATH = Path(_DB_PATH_STR)
except ImportError:
    # Fallback: <repo>/db/conversations.db relative to this file
    SQLITE_PATH = (
        Path(__file__).resolve().parent.parent.parent / "db" / "conversations.db"
    )


class ConversationStoreConfig(BaseModel):
    """Configuration for the SQLite conversation store."""

    sqlite_path: Path = Field(
        default=SQLITE_PATH,
        description="Path to the SQLite database file holding the conversation log.",
    )

    def ensure_directories(self) -> None:
        """Create the database directory if it does not exist."""
        self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
