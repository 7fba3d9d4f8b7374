"""Records passed across ports: incoming alerts, notifications and queue entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from rouse.alert import Status
from rouse.events import Channel, Severity
from rouse.ids import AlertId, PolicyId


@dataclass
class RawAlert:
    """Alert data from an external source, before domain validation."""

    external_id: str
    source: str
    severity: str
    labels: dict[str, str]
    summary: str
    status: str


@dataclass
class Notification:
    """A notification ready to be sent through a channel."""

    alert_id: AlertId
    severity: Severity
    summary: str
    labels: dict[str, str]
    target: str
    base_url: str


@dataclass
class NotifyResult:
    """Delivery metadata returned by a notifier."""

    external_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class AlertFilter:
    """Criteria for querying alerts; pages are numbered from 1."""

    status: Status | None = None
    severity: Severity | None = None
    source: str | None = None
    search: str | None = None
    page: int = 0
    per_page: int = 0


class QueueStatus(Enum):
    """State of a queued notification or escalation step."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    DEAD = "dead"


@dataclass
class PendingNotification:
    """A notification waiting in the delivery queue."""

    id: str
    alert_id: AlertId
    channel: Channel
    target: str
    payload: str
    status: QueueStatus
    next_attempt_at: datetime
    retry_count: int
    created_at: datetime


@dataclass
class PendingEscalation:
    """An escalation step waiting to fire."""

    id: str
    alert_id: AlertId
    policy_id: PolicyId
    step_order: int
    fires_at: datetime
    status: QueueStatus