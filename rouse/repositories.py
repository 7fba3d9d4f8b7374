"""Interfaces the application needs from storage, queues, notifiers and parsers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime

from rouse.alert import Alert
from rouse.escalation import EscalationPolicy
from rouse.events import Channel, DomainEvent
from rouse.grouping import AlertGroup
from rouse.noise import NoiseScore
from rouse.records import (
    AlertFilter,
    Notification,
    NotifyResult,
    PendingEscalation,
    PendingNotification,
    RawAlert,
)
from rouse.schedule import Schedule


class Notifier(ABC):
    """Delivers notifications over one channel."""

    @abstractmethod
    async def notify(self, notification: Notification) -> NotifyResult:
        """Send the notification, raising NotifyError on failure."""

    @abstractmethod
    def channel(self) -> Channel:
        """The channel this notifier delivers over."""


class AlertRepository(ABC):
    """Stores alerts."""

    @abstractmethod
    async def save(self, alert: Alert) -> None:
        """Insert or update an alert."""

    @abstractmethod
    async def find_by_id(self, alert_id: str) -> Alert | None:
        """The alert with the given id, or None."""

    @abstractmethod
    async def find_by_fingerprint(self, fingerprint: str) -> Alert | None:
        """An alert with the given fingerprint, or None."""

    @abstractmethod
    async def find_by_filter(self, alert_filter: AlertFilter) -> list[Alert]:
        """Alerts matching the filter."""


class ScheduleRepository(ABC):
    """Stores on-call schedules."""

    @abstractmethod
    async def save(self, schedule: Schedule) -> None:
        """Insert or update a schedule."""

    @abstractmethod
    async def find_by_id(self, schedule_id: str) -> Schedule | None:
        """The schedule with the given id, or None."""

    @abstractmethod
    async def list_all(self) -> list[Schedule]:
        """Every stored schedule."""


class EscalationRepository(ABC):
    """Stores escalation policies."""

    @abstractmethod
    async def save(self, policy: EscalationPolicy) -> None:
        """Insert or update a policy."""

    @abstractmethod
    async def find_by_id(self, policy_id: str) -> EscalationPolicy | None:
        """The policy with the given id, or None."""


class NotificationQueue(ABC):
    """A durable queue of notifications awaiting delivery."""

    @abstractmethod
    async def enqueue(self, notification: PendingNotification) -> None:
        """Add a notification to the queue."""

    @abstractmethod
    async def poll_pending(self) -> list[PendingNotification]:
        """Pending notifications whose next attempt is due."""

    @abstractmethod
    async def mark_sent(self, notification_id: str) -> None:
        """Record successful delivery."""

    @abstractmethod
    async def mark_failed(
        self, notification_id: str, error: str, next_attempt: datetime
    ) -> None:
        """Record a failed attempt and when to try again."""

    @abstractmethod
    async def mark_dead(self, notification_id: str) -> None:
        """Give up on a notification."""


class EscalationQueue(ABC):
    """A durable queue of escalation steps waiting to fire."""

    @abstractmethod
    async def enqueue_step(self, step: PendingEscalation) -> None:
        """Schedule an escalation step."""

    @abstractmethod
    async def poll_due(self) -> list[PendingEscalation]:
        """Pending steps whose firing time has come."""

    @abstractmethod
    async def cancel_for_alert(self, alert_id: str) -> None:
        """Cancel every pending step of an alert."""

    @abstractmethod
    async def mark_fired(self, step_id: str) -> None:
        """Record that a step fired."""


class EventPublisher(ABC):
    """Publishes domain events."""

    @abstractmethod
    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """Publish the events in order."""


class AlertGroupRepository(ABC):
    """Stores alert groups."""

    @abstractmethod
    async def save(self, group: AlertGroup) -> None:
        """Insert or update a group."""

    @abstractmethod
    async def find_active_by_key(self, key: str) -> AlertGroup | None:
        """The active group with the given grouping key, or None."""


class NoiseRepository(ABC):
    """Stores noise scores by fingerprint."""

    @abstractmethod
    async def get_or_create(self, fingerprint: str) -> NoiseScore:
        """The stored score for the fingerprint, or a fresh one."""

    @abstractmethod
    async def save(self, score: NoiseScore) -> None:
        """Insert or update a score."""

    @abstractmethod
    async def get_noisiest(self, min_fires: int) -> list[NoiseScore]:
        """Scores with at least ``min_fires`` firings, noisiest first."""


class AlertSourceParser(ABC):
    """Turns a payload from one alert source into raw alerts."""

    @abstractmethod
    def parse(self, payload: bytes, headers: Mapping[str, str]) -> list[RawAlert]:
        """Parse the payload, raising ParseError if it is not understood."""

    @abstractmethod
    def source_name(self) -> str:
        """Name of the source this parser understands."""