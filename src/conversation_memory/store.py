from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from .config import ConversationStoreConfig
from .errors import PersistenceError, ValidationError
from .models import (
    ROLES,
    ConversationQuery,
    ConversationRecord,
    ConversationStats,
    format_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"


def _escape_like(keyword: str) -> str:
    return (
        keyword.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


class ConversationStore:
    """SQLite-backed append-only log of conversation messages.

    A single ``conversations`` table is the source of truth:
    - id (INTEGER PRIMARY KEY AUTOINCREMENT, assigned here, never reused)
    - role ('user' | 'assistant')
    - content (non-empty text)
    - timestamp (caller-supplied, stored in canonical UTC ISO form)
    - created_at (insertion time)

    One connection is shared by every caller and guarded by a lock, so the
    store can be used from worker threads (``asyncio.to_thread``).
    Keyword search is case-insensitive for ASCII (SQLite ``LIKE``) and
    matches ``%`` and ``_`` literally. Results are newest ``timestamp``
    first, ties broken by ``id`` descending.
    """

    def __init__(self, db_path: Path | str) -> None:
        db_path = Path(db_path)
        self.db_path = str(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        try:
            self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
                self.db_path, check_same_thread=False
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
            self._create_schema()
        except sqlite3.Error as exc:
            logger.error("Could not open conversation database %s: %s", self.db_path, exc)
            raise PersistenceError(f"Could not open conversation database: {exc}") from exc

    @classmethod
    def from_config(cls, config: ConversationStoreConfig | None = None) -> "ConversationStore":
        cfg = config or ConversationStoreConfig()
        cfg.ensure_directories()
        return cls(cfg.sqlite_path)

    def _create_schema(self) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS conversations (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    role        TEXT NOT NULL CHECK(role IN ('user', 'assistant')),
                    content     TEXT NOT NULL,
                    timestamp   TEXT NOT NULL,
                    created_at  TEXT NOT NULL
                )
                """
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_conversations_timestamp ON conversations (timestamp)"
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_conversations_role ON conversations (role)"
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_conversations_created_at ON conversations (created_at)"
            )
            self._conn.commit()

    def _connection(self) -> sqlite3.Connection:
        """Caller must hold _lock."""
        if self._conn is None:
            raise PersistenceError("Conversation store is closed")
        return self._conn

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> ConversationRecord:
        return ConversationRecord(
            id=row["id"],
            role=row["role"],
            content=row["content"],
            timestamp=row["timestamp"],
            created_at=row["created_at"],
        )

    def store(self, role: str, content: str, timestamp: str | datetime) -> int:
        """Append one message and return its new id."""
        if role not in ROLES:
            raise ValidationError('Invalid role. Must be either "user" or "assistant"')
        if not content:
            raise ValidationError("content must not be empty")
        stored_timestamp = format_timestamp(timestamp)

        with self._lock:
            conn = self._connection()
            try:
                cur = conn.execute(
                    """
                    INSERT INTO conversations (role, content, timestamp, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (role, content, stored_timestamp, utc_now()),
                )
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                logger.error("Failed to store %s message: %s", role, exc)
                raise PersistenceError(f"Failed to store conversation: {exc}") from exc
            return int(cur.lastrowid)

    def query(self, query: ConversationQuery | None = None) -> List[ConversationRecord]:
        """Return messages matching every set field of ``query``."""
        q = query or ConversationQuery()
        sql = "SELECT * FROM conversations WHERE 1=1"
        params: List[Any] = []

        if q.keyword:
            sql += f" AND content LIKE ? ESCAPE '{_LIKE_ESCAPE}'"
            params.append(f"%{_escape_like(q.keyword)}%")
        if q.role:
            if q.role not in ROLES:
                raise ValidationError('Invalid role. Must be either "user" or "assistant"')
            sql += " AND role = ?"
            params.append(q.role)
        if q.start_time:
            sql += " AND timestamp >= ?"
            params.append(format_timestamp(q.start_time))
        if q.end_time:
            sql += " AND timestamp <= ?"
            params.append(format_timestamp(q.end_time))

        sql += " ORDER BY timestamp DESC, id DESC"
        if q.limit is not None and q.limit > 0:
            sql += " LIMIT ?"
            params.append(q.limit)

        with self._lock:
            conn = self._connection()
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                logger.error("Conversation query failed: %s", exc)
                raise PersistenceError(f"Failed to retrieve conversations: {exc}") from exc
        return [self._row_to_record(r) for r in rows]

    def stats(self) -> ConversationStats:
        """Counts and timestamp range over the whole log, read in one statement."""
        with self._lock:
            conn = self._connection()
            try:
                row = conn.execute(
                    """
                    SELECT COUNT(*)                                          AS total,
                           COALESCE(SUM(CASE WHEN role = 'user' THEN 1 END), 0)      AS user_messages,
                           COALESCE(SUM(CASE WHEN role = 'assistant' THEN 1 END), 0) AS assistant_messages,
                           MIN(timestamp)                                    AS oldest,
                           MAX(timestamp)                                    AS newest
                    FROM conversations
                    """
                ).fetchone()
            except sqlite3.Error as exc:
                logger.error("Conversation stats failed: %s", exc)
                raise PersistenceError(f"Failed to compute stats: {exc}") from exc
        return ConversationStats(
            total=row["total"],
            user_messages=row["user_messages"],
            assistant_messages=row["assistant_messages"],
            oldest_timestamp=row["oldest"],
            newest_timestamp=row["newest"],
        )

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
