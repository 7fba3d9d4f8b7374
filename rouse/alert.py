"""Alerts, their lifecycle, sources and label fingerprints."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from rouse.errors import AlertAlreadyResolved
from rouse.events import (
    AlertAcknowledged,
    AlertReceived,
    AlertResolved,
    DomainEvent,
    Severity,
)
from rouse.ids import AlertId, UserId


class Status(Enum):
    """Lifecycle state of an alert."""

    FIRING = "Firing"
    ACKNOWLEDGED = "Acknowledged"
    RESOLVED = "Resolved"


@dataclass(frozen=True)
class Source:
    """The system that sent an alert."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Fingerprint:
    """A 16-hex-digit digest of an alert's labels, independent of label order."""

    value: str

    @classmethod
    def from_labels(cls, labels: Mapping[str, str]) -> Fingerprint:
        digest = hashlib.blake2b(digest_size=8)
        for key, val in sorted(labels.items()):
            for part in (key, val):
                digest.update(part.encode("utf-8"))
                digest.update(b"\xff")
        return cls(digest.hexdigest())

    def __str__(self) -> str:
        return self.value


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_time(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).astimezone(timezone.utc)


@dataclass
class Alert:
    """An alert and its lifecycle state."""

    id: AlertId
    external_id: str
    source: Source
    severity: Severity
    status: Status
    fingerprint: Fingerprint
    labels: dict[str, str]
    summary: str
    created_at: datetime
    acknowledged_at: datetime | None = None
    acknowledged_by: UserId | None = None
    resolved_at: datetime | None = None

    def __post_init__(self) -> None:
        self.labels = dict(sorted(self.labels.items()))

    @classmethod
    def create(
        cls,
        external_id: str,
        source: Source,
        severity: Severity,
        labels: Mapping[str, str],
        summary: str,
        now: datetime,
    ) -> tuple[Alert, list[DomainEvent]]:
        """Create a firing alert and the event announcing it."""
        alert = cls(
            id=AlertId.new(),
            external_id=external_id,
            source=source,
            severity=severity,
            status=Status.FIRING,
            fingerprint=Fingerprint.from_labels(labels),
            labels=dict(labels),
            summary=summary,
            created_at=now,
        )
        events: list[DomainEvent] = [
            AlertReceived(
                alert_id=alert.id,
                source=source.name,
                severity=severity,
                occurred_at=now,
            )
        ]
        return alert, events

    def acknowledge(self, user_id: UserId, now: datetime) -> list[DomainEvent]:
        """Acknowledge a firing alert; a repeat acknowledgement changes nothing."""
        if self.status is Status.RESOLVED:
            raise AlertAlreadyResolved()
        if self.status is Status.ACKNOWLEDGED:
            return []
        self.status = Status.ACKNOWLEDGED
        self.acknowledged_at = now
        self.acknowledged_by = user_id
        return [AlertAcknowledged(alert_id=self.id, user_id=user_id, occurred_at=now)]

    def resolve(self, resolved_by: str, now: datetime) -> list[DomainEvent]:
        """Resolve the alert; resolving a resolved alert changes nothing."""
        if self.status is Status.RESOLVED:
            return []
        self.status = Status.RESOLVED
        self.resolved_at = now
        return [AlertResolved(alert_id=self.id, resolved_by=resolved_by, occurred_at=now)]

    def to_dict(self) -> dict[str, Any]:
        """Serialise to JSON-ready values."""
        return {
            "id": str(self.id),
            "external_id": self.external_id,
            "source": self.source.name,
            "severity": self.severity.value,
            "status": self.status.value,
            "fingerprint": self.fingerprint.value,
            "labels": dict(self.labels),
            "summary": self.summary,
            "created_at": _format_time(self.created_at),
            "acknowledged_at": (
                _format_time(self.acknowledged_at) if self.acknowledged_at else None
            ),
            "acknowledged_by": str(self.acknowledged_by) if self.acknowledged_by else None,
            "resolved_at": _format_time(self.resolved_at) if self.resolved_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Alert:
        """Rebuild an alert from the output of ``to_dict``."""
        acknowledged_at = data.get("acknowledged_at")
        acknowledged_by = data.get("acknowledged_by")
        resolved_at = data.get("resolved_at")
        return cls(
            id=AlertId.parse(data["id"]),
            external_id=data["external_id"],
            source=Source(data["source"]),
            severity=Severity(data["severity"]),
            status=Status(data["status"]),
            fingerprint=Fingerprint(data["fingerprint"]),
            labels=dict(data["labels"]),
            summary=data["summary"],
            created_at=_parse_time(data["created_at"]),
            acknowledged_at=_parse_time(acknowledged_at) if acknowledged_at else None,
            acknowledged_by=UserId.parse(acknowledged_by) if acknowledged_by else None,
            resolved_at=_parse_time(resolved_at) if resolved_at else None,
        )