"""A SQLite database holding alerts, schedules, policies, queues, events and scores."""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Iterator
from types import TracebackType

import aiosqlite

from rouse.errors import PersistenceError, PortConnectionError

_KEY = "TEXT PRIMARY KEY"
_TEXT = "TEXT NOT NULL"
_INT = "INTEGER NOT NULL"
_COUNTER = "INTEGER NOT NULL DEFAULT 0"
_QUEUE_STATE = "TEXT NOT NULL DEFAULT 'pending'"

# Table name -> ordered (column, declaration) pairs.
_TABLES: dict[str, tuple[tuple[str, str], ...]] = {
    "alerts": (
        ("id", _KEY),
        ("fingerprint", _TEXT),
        ("status", _TEXT),
        ("severity", _TEXT),
        ("source", _TEXT),
        ("data", _TEXT),
        ("created_at", _TEXT),
    ),
    "schedules": (("id", _KEY), ("data", _TEXT)),
    "escalation_policies": (("id", _KEY), ("data", _TEXT)),
    "notifications": (
        ("id", _KEY),
        ("alert_id", _TEXT),
        ("channel", _TEXT),
        ("target", _TEXT),
        ("payload", _TEXT),
        ("status", _QUEUE_STATE),
        ("next_attempt_at", _TEXT),
        ("retry_count", _COUNTER),
        ("created_at", _TEXT),
    ),
    "escalation_steps": (
        ("id", _KEY),
        ("alert_id", _TEXT),
        ("policy_id", _TEXT),
        ("step_order", _INT),
        ("fires_at", _TEXT),
        ("status", _QUEUE_STATE),
    ),
    "events": (
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        ("event_type", _TEXT),
        ("data", _TEXT),
        ("occurred_at", _TEXT),
    ),
    "alert_groups": (
        ("id", _KEY),
        ("grouping_key", _TEXT),
        ("data", _TEXT),
        ("last_added_at", _TEXT),
    ),
    "noise_scores": (
        ("fingerprint", _KEY),
        ("total_fires", _COUNTER),
        ("dismissed_count", _COUNTER),
        ("acted_on_count", _COUNTER),
        ("avg_time_to_ack_secs", _COUNTER),
    ),
}

# (index name, table, indexed columns); each is created after its table.
_INDEXES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("idx_alerts_fingerprint", "alerts", ("fingerprint",)),
    ("idx_notifications_pending", "notifications", ("status", "next_attempt_at")),
    ("idx_escalation_steps_pending", "escalation_steps", ("status", "fires_at")),
    ("idx_alert_groups_key", "alert_groups", ("grouping_key",)),
)


def _schema_statements() -> Iterator[str]:
    for table, columns in _TABLES.items():
        body = ", ".join(f"{name} {decl}" for name, decl in columns)
        yield f"CREATE TABLE IF NOT EXISTS {table} ({body})"
    for index, table, columns in _INDEXES:
        yield f"CREATE INDEX IF NOT EXISTS {index} ON {table}({', '.join(columns)})"


class SqliteDb:
    """An open SQLite database with the schema in place."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn: aiosqlite.Connection | None = conn

    @classmethod
    async def connect(cls, path: str | os.PathLike[str] = ":memory:") -> SqliteDb:
        """Open the database at ``path`` and create any missing tables."""
        try:
            conn = await aiosqlite.connect(path)
        except sqlite3.Error as exc:
            raise PortConnectionError(str(exc)) from exc
        db = cls(conn)
        try:
            await db._init_schema()
        except BaseException:
            await db.close()
            raise
        return db

    async def _init_schema(self) -> None:
        conn = self.connection()
        try:
            for statement in _schema_statements():
                await conn.execute(statement)
            await conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(str(exc)) from exc

    async def close(self) -> None:
        """Close the database; closing twice is harmless."""
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await conn.close()

    def connection(self) -> aiosqlite.Connection:
        """The underlying connection, raising PortConnectionError once closed."""
        if self._conn is None:
            raise PortConnectionError("database is closed")
        return self._conn

    async def __aenter__(self) -> SqliteDb:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()