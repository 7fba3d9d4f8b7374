"""Receiving alerts from sources and moving them through their lifecycle."""

from __future__ import annotations

from datetime import datetime

from rouse.alert import Alert, Fingerprint, Source
from rouse.errors import NotFound
from rouse.events import AlertDeduplicated, Severity
from rouse.ids import AlertId, UserId
from rouse.records import RawAlert
from rouse.repositories import AlertRepository, EscalationQueue, EventPublisher
from rouse.router import AlertRouter

_SEVERITIES = {
    "critical": Severity.CRITICAL,
    "warning": Severity.WARNING,
}


def _parse_severity(text: str) -> Severity:
    return _SEVERITIES.get(text.lower(), Severity.INFO)


class AlertService:
    """Deduplicates, stores and routes incoming alerts; acknowledges and resolves them."""

    def __init__(
        self,
        alerts: AlertRepository,
        escalation_queue: EscalationQueue,
        events: EventPublisher,
        router: AlertRouter,
    ) -> None:
        self.alerts = alerts
        self.escalation_queue = escalation_queue
        self.events = events
        self.router = router

    async def receive(self, raw: RawAlert, now: datetime) -> AlertId:
        """Take in an alert from a source and return the id of the alert it maps to.

        A ``resolved`` status resolves the stored alert with the same fingerprint,
        raising NotFound if there is none. An alert whose fingerprint is already
        stored is reported as deduplicated instead of being stored again.
        """
        labels = dict(raw.labels)
        fingerprint = Fingerprint.from_labels(labels)

        if raw.status.lower() == "resolved":
            alert = await self.alerts.find_by_fingerprint(fingerprint.value)
            if alert is None:
                raise NotFound()
            events = alert.resolve(f"source:{raw.source}", now)
            if events:
                await self.escalation_queue.cancel_for_alert(str(alert.id))
                await self.alerts.save(alert)
                await self.events.publish(events)
            return alert.id

        existing = await self.alerts.find_by_fingerprint(fingerprint.value)
        if existing is not None:
            await self.events.publish(
                [
                    AlertDeduplicated(
                        alert_id=existing.id,
                        fingerprint=str(fingerprint),
                        occurred_at=now,
                    )
                ]
            )
            return existing.id

        alert, creation_events = Alert.create(
            raw.external_id,
            Source(raw.source),
            _parse_severity(raw.severity),
            labels,
            raw.summary,
            now,
        )
        await self.alerts.save(alert)
        await self.events.publish(creation_events)

        # Routing is best effort: an alert without a matching policy is still kept.
        self.router.match_alert(labels)

        return alert.id

    async def _load(self, alert_id: AlertId) -> Alert:
        alert = await self.alerts.find_by_id(str(alert_id))
        if alert is None:
            raise NotFound()
        return alert

    async def acknowledge(self, alert_id: AlertId, user_id: UserId, now: datetime) -> None:
        """Acknowledge an alert and cancel its pending escalation."""
        alert = await self._load(alert_id)
        events = alert.acknowledge(user_id, now)
        if not events:
            return
        await self.escalation_queue.cancel_for_alert(str(alert_id))
        await self.alerts.save(alert)
        await self.events.publish(events)

    async def resolve(self, alert_id: AlertId, resolved_by: str, now: datetime) -> None:
        """Resolve an alert and cancel its pending escalation."""
        alert = await self._load(alert_id)
        events = alert.resolve(resolved_by, now)
        if not events:
            return
        await self.escalation_queue.cancel_for_alert(str(alert_id))
        await self.alerts.save(alert)
        await self.events.publish(events)