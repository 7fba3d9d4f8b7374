"""Repositories and an event publisher stored in a SQLite database."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from rouse.alert import Alert
from rouse.errors import DomainError, PersistenceError
from rouse.events import DomainEvent
from rouse.grouping import AlertGroup
from rouse.records import AlertFilter
from rouse.repositories import (
    AlertGroupRepository,
    AlertRepository,
    EventPublisher,
    ScheduleRepository,
)
from rouse.schedule import Schedule
from rouse.storage import SqliteDb

_DEFAULT_PER_PAGE = 50


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


@contextmanager
def _persistence_errors() -> Iterator[None]:
    try:
        yield
    except (sqlite3.Error, ValueError, KeyError, TypeError, DomainError) as exc:
        raise PersistenceError(str(exc)) from exc


class _SqliteStore:
    def __init__(self, db: SqliteDb) -> None:
        self._db = db

    async def _write(self, sql: str, params: Sequence[Any]) -> None:
        conn = self._db.connection()
        with _persistence_errors():
            await conn.execute(sql, params)
            await conn.commit()

    async def _fetch_data(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        conn = self._db.connection()
        with _persistence_errors():
            async with conn.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
            return [json.loads(row[0]) for row in rows]


class SqliteAlertRepository(_SqliteStore, AlertRepository):
    """Alerts stored as JSON with indexed status, severity, source and fingerprint."""

    async def save(self, alert: Alert) -> None:
        """Insert the alert or update the stored one with the same id."""
        await self._write(
            """INSERT INTO alerts (id, fingerprint, status, severity, source, data, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                  fingerprint = excluded.fingerprint,
                  status = excluded.status,
                  severity = excluded.severity,
                  source = excluded.source,
                  data = excluded.data""",
            (
                str(alert.id),
                alert.fingerprint.value,
                alert.status.value,
                alert.severity.value,
                alert.source.name,
                json.dumps(alert.to_dict()),
                _format_time(alert.created_at),
            ),
        )

    async def _first(self, sql: str, params: Sequence[Any]) -> Alert | None:
        found = await self._fetch_data(sql, params)
        if not found:
            return None
        with _persistence_errors():
            return Alert.from_dict(found[0])

    async def find_by_id(self, alert_id: str) -> Alert | None:
        """The alert with the given id, or None."""
        return await self._first("SELECT data FROM alerts WHERE id = ?", (alert_id,))

    async def find_by_fingerprint(self, fingerprint: str) -> Alert | None:
        """An alert with the given fingerprint, or None."""
        return await self._first(
            "SELECT data FROM alerts WHERE fingerprint = ? LIMIT 1", (fingerprint,)
        )

    async def find_by_filter(self, alert_filter: AlertFilter) -> list[Alert]:
        """Matching alerts, newest first, one page at a time (50 per page by default)."""
        clauses: list[str] = []
        params: list[Any] = []
        if alert_filter.status is not None:
            clauses.append("status = ?")
            params.append(alert_filter.status.value)
        if alert_filter.severity is not None:
            clauses.append("severity = ?")
            params.append(alert_filter.severity.value)
        if alert_filter.source is not None:
            clauses.append("source = ?")
            params.append(alert_filter.source)
        if alert_filter.search is not None:
            clauses.append("data LIKE ?")
            params.append(f"%{alert_filter.search}%")

        per_page = alert_filter.per_page or _DEFAULT_PER_PAGE
        offset = max(alert_filter.page - 1, 0) * per_page
        where = "".join(f" AND {clause}" for clause in clauses)
        sql = (
            f"SELECT data FROM alerts WHERE 1=1{where}"
            " ORDER BY created_at DESC LIMIT ? OFFSET ?"
        )
        rows = await self._fetch_data(sql, (*params, per_page, offset))
        with _persistence_errors():
            return [Alert.from_dict(data) for data in rows]


class SqliteAlertGroupRepository(_SqliteStore, AlertGroupRepository):
    """Alert groups stored as JSON, looked up by grouping key."""

    async def save(self, group: AlertGroup) -> None:
        """Insert the group or update the stored one with the same id."""
        await self._write(
            """INSERT INTO alert_groups (id, grouping_key, data, last_added_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                  data = excluded.data,
                  last_added_at = excluded.last_added_at""",
            (
                str(group.id),
                group.grouping_key,
                json.dumps(group.to_dict()),
                _format_time(group.last_added_at),
            ),
        )

    async def find_active_by_key(self, key: str) -> AlertGroup | None:
        """A group with the given grouping key, or None."""
        found = await self._fetch_data(
            "SELECT data FROM alert_groups WHERE grouping_key = ? LIMIT 1", (key,)
        )
        if not found:
            return None
        with _persistence_errors():
            return AlertGroup.from_dict(found[0])


class SqliteScheduleRepository(_SqliteStore, ScheduleRepository):
    """Schedules stored as JSON."""

    async def save(self, schedule: Schedule) -> None:
        """Insert the schedule or update the stored one with the same id."""
        await self._write(
            """INSERT INTO schedules (id, data) VALUES (?, ?)
               ON CONFLICT(id) DO UPDATE SET data = excluded.data""",
            (str(schedule.id), json.dumps(schedule.to_dict())),
        )

    async def find_by_id(self, schedule_id: str) -> Schedule | None:
        """The schedule with the given id, or None."""
        found = await self._fetch_data(
            "SELECT data FROM schedules WHERE id = ?", (schedule_id,)
        )
        if not found:
            return None
        with _persistence_errors():
            return Schedule.from_dict(found[0])

    async def list_all(self) -> list[Schedule]:
        """Every stored schedule."""
        rows = await self._fetch_data("SELECT data FROM schedules")
        with _persistence_errors():
            return [Schedule.from_dict(data) for data in rows]


class SqliteEventPublisher(_SqliteStore, EventPublisher):
    """Appends domain events to the events table."""

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """Store each event with its type, JSON body and time, in order."""
        for event in events:
            await self._write(
                "INSERT INTO events (event_type, data, occurred_at) VALUES (?, ?, ?)",
                (
                    event.event_type(),
                    json.dumps(event.to_dict()),
                    _format_time(event.occurred_at),
                ),
            )