# rouse

`rouse` is an asynchronous library for handling on-call alerts. It takes in
alerts from monitoring sources, suppresses duplicates, groups related alerts,
tracks how noisy each alert is, and works out who is on call from a rotating
schedule with overrides. Alerts, alert groups, schedules and domain events can
be stored in SQLite through `aiosqlite`.

## Installation

```
pip install rouse
```

To run the test suite:

```
pip install "rouse[test]"
pytest
```

## Modules

| Module | What it holds |
| --- | --- |
| `rouse.errors` | `DomainError`, `PortError`, `NotifyError`, `ParseError`, `RoutingError` and their subclasses |
| `rouse.ids` | `EntityId` and the typed ids `AlertId`, `UserId`, `ScheduleId`, `PolicyId`, `TeamId`, `GroupId`, `OverrideId` |
| `rouse.events` | `Channel`, `Severity`, `DomainEvent` and its event classes |
| `rouse.alert` | `Alert`, `Status`, `Source`, `Fingerprint` |
| `rouse.noise` | `NoiseScore`, `classify_response` |
| `rouse.grouping` | `AlertGroup`, `compute_grouping_key`, `should_group` |
| `rouse.escalation` | `EscalationPolicy`, `EscalationStep`, `OnCallTarget`, `UserTarget`, `TeamTarget`, `OnCallModifier` |
| `rouse.records` | `RawAlert`, `Notification`, `NotifyResult`, `AlertFilter`, `QueueStatus`, `PendingNotification`, `PendingEscalation` |
| `rouse.schedule` | `Schedule`, `Rotation`, `HandoffTime`, `ScheduleOverride` |
| `rouse.user` | `User`, `Team`, `Role`, `Phone` |
| `rouse.router` | `AlertRouter`, `Route` |
| `rouse.repositories` | abstract interfaces: `AlertRepository`, `ScheduleRepository`, `EscalationRepository`, `AlertGroupRepository`, `NoiseRepository`, `NotificationQueue`, `EscalationQueue`, `EventPublisher`, `Notifier`, `AlertSourceParser` |
| `rouse.alert_service` | `AlertService` |
| `rouse.grouping_service` | `GroupingService`, `GroupingResult`, `GroupingOutcome` |
| `rouse.schedule_service` | `ScheduleService` |
| `rouse.noise_service` | `NoiseService` |
| `rouse.storage` | `SqliteDb` |
| `rouse.sqlite_repositories` | `SqliteAlertRepository`, `SqliteAlertGroupRepository`, `SqliteScheduleRepository`, `SqliteEventPublisher` |

## Concepts

- **Alert.** `Alert.create(...)` returns a new alert in `Status.FIRING` together
  with an `AlertReceived` event. `acknowledge` and `resolve` return lists of
  events. Acknowledging a resolved alert raises `AlertAlreadyResolved`.
  Acknowledging twice, or resolving twice, returns an empty list and changes
  nothing.
- **Fingerprint.** `Fingerprint.from_labels` hashes an alert's labels into 16 hex
  digits. Label order does not matter. Alerts with the same labels get the same
  fingerprint.
- **Domain events.** Each event class reports `event_type()`, for example
  `"alert.received"` or `"oncall.changed"`. `to_dict()` returns the event as
  `{ClassName: {field: value}}` with JSON-ready values.
- **AlertService.** `receive(raw, now)` works in one of three ways:
  - If the raw status is `resolved` (in any case), it resolves the stored alert
    with the same fingerprint, with `resolved_by` set to `"source:<source>"`. If
    no such alert exists it raises `NotFound`.
  - If an alert with that fingerprint is already stored, it publishes
    `AlertDeduplicated` and returns the existing id.
  - Otherwise it stores a new alert. The severity strings `critical` and
    `warning` map to those severities; any other string becomes `INFO`.

  `acknowledge` and `resolve` cancel the alert's pending escalation steps, save
  the alert and publish the events. When nothing changed they do none of this.
- **Grouping.** `compute_grouping_key` returns `"<source>:<service>"`, or just
  the source when there is no `service` label. `GroupingService.process` adds
  an alert to the group found for its key when the alert was created less than
  the window after the group's last addition. Otherwise it starts a new group.
- **Noise.** `NoiseScore` counts fires, dismissals and actions. `score()` is
  dismissals divided by fires. `is_noise()` is true above 0.8 and
  `suggest_suppression()` above 0.95. `classify_response` counts a response
  as a dismissal in either of two cases: the acknowledgement came within 5
  seconds, or the resolve came within 60 seconds of the acknowledgement.
  `NoiseService.record_response` applies the same rule. For an alert resolved
  without acknowledgement, it compares the total time against the 5-second
  limit.
- **Schedules.** `Schedule` rotates through its participants in shifts of
  `Rotation.daily()`, `Rotation.weekly()` or `Rotation.custom(seconds)`. Shifts
  are counted from Monday 6 January 2020, midnight, in the schedule's time zone.
  The `handoff` time is stored with the schedule but does not shift the
  rotation. While a `ScheduleOverride` is active it takes precedence over the
  rotation, over the half-open period `[start, end)`. When several overrides are
  active, the one added last wins. Adding an override whose end is not after
  its start raises `InvalidOverridePeriod`.
- **Escalation.** `EscalationPolicy` holds ordered `EscalationStep`s. Each step
  has targets and channels. `next_step(current, repetition)` returns the
  following step. After the last step it loops back to the first while
  `repetition < repeat_count`, and otherwise returns `None`.
- **Routing.** `AlertRouter.match_alert` returns the policy id of the first
  `Route` whose matchers all equal the alert's labels. A route with no matchers
  matches every alert.
- **Users.** `Phone` accepts E.164 numbers only: `+` followed by digits, 8 to 16
  characters in all. `User.can_be_on_call()` is true once the user has a phone
  or a Slack, Discord, Telegram or WhatsApp id.

## Example

```python
import asyncio
from datetime import datetime, timezone

from rouse.alert_service import AlertService
from rouse.records import RawAlert
from rouse.router import AlertRouter
from rouse.storage import SqliteDb
from rouse.sqlite_repositories import SqliteAlertRepository, SqliteEventPublisher


class NoEscalations:
    async def enqueue_step(self, step): ...
    async def poll_due(self): return []
    async def cancel_for_alert(self, alert_id): ...
    async def mark_fired(self, step_id): ...


async def main():
    async with await SqliteDb.connect(":memory:") as db:
        service = AlertService(
            SqliteAlertRepository(db),
            NoEscalations(),
            SqliteEventPublisher(db),
            AlertRouter([]),
        )
        now = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)
        raw = RawAlert(
            external_id="ext-1",
            source="alertmanager",
            severity="critical",
            labels={"service": "api"},
            summary="High CPU",
            status="firing",
        )
        alert_id = await service.receive(raw, now)
        # The same labels arrive again, so the alert is deduplicated
        assert await service.receive(raw, now) == alert_id
        await service.resolve(alert_id, "operator", now)


asyncio.run(main())
```

## Storage

`SqliteDb.connect(path)` opens a database and creates any missing tables. The
default path is `":memory:"`. The database can be used as an async context
manager. `close()` is safe to call twice.

`SqliteAlertRepository.find_by_filter` filters alerts by `AlertFilter` status,
severity, source and text search. It returns the newest alerts first, one page
at a time. Pages are numbered from 1, and a page holds 50 alerts unless
`per_page` says otherwise.

## Errors

Every failure is raised as an exception:

- domain rule violations are subclasses of `DomainError`;
- storage problems are subclasses of `PortError`. A missing record raises
  `NotFound`, and a database failure raises `PersistenceError` or
  `PortConnectionError`.

All of them are defined in `rouse.errors`.

## What the package does not do

- It has no command-line program, no HTTP server and no webhook endpoint. It is
  used as a library from your own asyncio code.
- It provides no implementations of `Notifier` or `AlertSourceParser`. It sends
  nothing over Slack, SMS or any other channel, and parses no payloads from
  monitoring tools.
- SQLite implementations exist only for alerts, alert groups, schedules and
  events. `EscalationRepository`, `NotificationQueue`, `EscalationQueue` and
  `NoiseRepository` are interfaces only. `SqliteDb` creates tables for them,
  but nothing in the package reads or writes those tables.
- `AlertService.receive` looks up a matching route but does not enqueue
  escalation steps, so escalations are never started automatically.