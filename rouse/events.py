"""Domain events, channels and severities."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from rouse.ids import AlertId, EntityId, PolicyId, ScheduleId, UserId


class Channel(Enum):
    """A notification delivery channel."""

    SLACK = "Slack"
    DISCORD = "Discord"
    TELEGRAM = "Telegram"
    WHATSAPP = "WhatsApp"
    SMS = "Sms"
    PHONE = "Phone"
    EMAIL = "Email"
    WEBHOOK = "Webhook"


class Severity(Enum):
    """How urgent an alert is."""

    CRITICAL = "Critical"
    WARNING = "Warning"
    INFO = "Info"


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, EntityId):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


class DomainEvent:
    """Base of all events; every event has an ``occurred_at`` timestamp."""

    _event_type: ClassVar[str]

    def __init_subclass__(cls, *, event_type: str, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._event_type = event_type

    def event_type(self) -> str:
        """The dotted name of this event, e.g. ``alert.received``."""
        return self._event_type

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Serialise as ``{VariantName: {field: value}}`` with JSON-ready values."""
        body = {f.name: _plain(getattr(self, f.name)) for f in fields(self)}
        return {type(self).__name__: body}


@dataclass(frozen=True)
class AlertReceived(DomainEvent, event_type="alert.received"):
    alert_id: AlertId
    source: str
    severity: Severity
    occurred_at: datetime


@dataclass(frozen=True)
class AlertDeduplicated(DomainEvent, event_type="alert.deduplicated"):
    alert_id: AlertId
    fingerprint: str
    occurred_at: datetime


@dataclass(frozen=True)
class AlertAcknowledged(DomainEvent, event_type="alert.acknowledged"):
    alert_id: AlertId
    user_id: UserId
    occurred_at: datetime


@dataclass(frozen=True)
class AlertEscalated(DomainEvent, event_type="alert.escalated"):
    alert_id: AlertId
    step: int
    targets: tuple[str, ...]
    occurred_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))


@dataclass(frozen=True)
class AlertResolved(DomainEvent, event_type="alert.resolved"):
    alert_id: AlertId
    resolved_by: str
    occurred_at: datetime


@dataclass(frozen=True)
class NotificationSent(DomainEvent, event_type="notification.sent"):
    alert_id: AlertId
    channel: Channel
    target: str
    external_id: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class NotificationFailed(DomainEvent, event_type="notification.failed"):
    alert_id: AlertId
    channel: Channel
    target: str
    error: str
    occurred_at: datetime


@dataclass(frozen=True)
class OnCallChanged(DomainEvent, event_type="oncall.changed"):
    schedule_id: ScheduleId
    new_user: UserId
    previous_user: UserId | None
    occurred_at: datetime


@dataclass(frozen=True)
class EscalationExhausted(DomainEvent, event_type="escalation.exhausted"):
    alert_id: AlertId
    policy_id: PolicyId
    occurred_at: datetime