"""SQLite storage adapter.

Implements the core ViolationLogPort using a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from core.config import ViolationRecord


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the ViolationLogPort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - moderation_log: append-only log of guard violations
        """

        with self._connect() as conn:
            # moderation_log is kept denormalized; it is only ever appended to
            # and read back for auditing.
            # Fields:
            # - id: auto-increment primary key
            # - chat_id: chat the message was posted in
            # - sender_id: author of the offending message
            # - guard_id: guard that blocked the message
            # - action: "logged" (observation mode) or "deleted"
            # - reason: user-facing reason sent to the sender
            # - message_id: message id within the chat
            # - timestamp: ISO-8601 UTC time of the verdict
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS moderation_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    chat_id TEXT NOT NULL,
                    sender_id TEXT NOT NULL,
                    guard_id TEXT NOT NULL,
                    action TEXT NOT NULL,
                    reason TEXT,
                    message_id TEXT,
                    timestamp TIMESTAMP NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_moderation_log_chat ON moderation_log (chat_id, timestamp)"
            )

    def log_violation(self, record: ViolationRecord) -> None:
        """Append a violation to the moderation log."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO moderation_log (
                    chat_id,
                    sender_id,
                    guard_id,
                    action,
                    reason,
                    message_id,
                    timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.chat_id,
                    record.sender_id,
                    record.guard_id,
                    record.action,
                    record.reason,
                    record.message_id,
                    record.timestamp,
                ),
            )

    def recent_violations(self, chat_id: Optional[str] = None, limit: int = 50) -> List[ViolationRecord]:
        """Return the newest violations first, optionally for one chat."""

        query = "SELECT * FROM moderation_log"
        params: tuple = ()
        if chat_id is not None:
            query += " WHERE chat_id = ?"
            params = (chat_id,)
        query += " ORDER BY id DESC LIMIT ?"
        with self._connect() as conn:
            rows = conn.execute(query, (*params, limit)).fetchall()
        return [
            ViolationRecord(
                chat_id=row["chat_id"],
                sender_id=row["sender_id"],
                guard_id=row["guard_id"],
                action=row["action"],
                reason=row["reason"],
                message_id=row["message_id"],
                timestamp=row["timestamp"],
            )
            for row in rows
        ]

    def cleanup_violations(self, ttl_days: int) -> int:
        """Delete log rows older than ``ttl_days`` and return the number removed."""

        cutoff = datetime.now(timezone.utc) - timedelta(days=ttl_days)
        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM moderation_log WHERE timestamp < ?",
                (cutoff.isoformat(),),
            )
            return cur.rowcount
