import json
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio

from rouse.alert import Alert, Source, Status
from rouse.errors import PortConnectionError
from rouse.events import AlertReceived, Severity
from rouse.grouping import AlertGroup
from rouse.ids import AlertId, UserId
from rouse.records import AlertFilter
from rouse.schedule import HandoffTime, Rotation, Schedule
from rouse.sqlite_repositories import (
    SqliteAlertGroupRepository,
    SqliteAlertRepository,
    SqliteEventPublisher,
    SqliteScheduleRepository,
)
from rouse.storage import SqliteDb


def ts(text):
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


@pytest_asyncio.fixture
async def db():
    database = await SqliteDb.connect(":memory:")
    yield database
    await database.close()


def make_alert(service, at="2025-01-15T10:00:00Z", severity=Severity.CRITICAL, source="alertmanager"):
    alert, _ = Alert.create(
        "ext-1",
        Source(source),
        severity,
        {"service": service},
        "High CPU",
        ts(at),
    )
    return alert


def make_schedule(name):
    return Schedule(
        name,
        ZoneInfo("Europe/Zurich"),
        Rotation.weekly(),
        [UserId.new(), UserId.new()],
        HandoffTime(day=0, hour=9, minute=0),
    )


# --- alerts ---


@pytest.mark.asyncio
async def test_alert_save_and_find_by_id(db):
    repo = SqliteAlertRepository(db)
    alert = make_alert("api")
    await repo.save(alert)

    found = await repo.find_by_id(str(alert.id))
    assert found.id == alert.id
    assert found.status is Status.FIRING
    assert found == alert


@pytest.mark.asyncio
async def test_alert_find_by_id_returns_none(db):
    repo = SqliteAlertRepository(db)
    assert await repo.find_by_id("00000000-0000-0000-0000-000000000000") is None


@pytest.mark.asyncio
async def test_alert_save_and_find_by_fingerprint(db):
    repo = SqliteAlertRepository(db)
    alert = make_alert("payments")
    await repo.save(alert)

    found = await repo.find_by_fingerprint(alert.fingerprint.value)
    assert found.id == alert.id


@pytest.mark.asyncio
async def test_alert_find_by_fingerprint_returns_none(db):
    repo = SqliteAlertRepository(db)
    assert await repo.find_by_fingerprint("0000000000000000") is None


@pytest.mark.asyncio
async def test_alert_save_updates_existing(db):
    repo = SqliteAlertRepository(db)
    alert, _ = Alert.create(
        "ext-1", Source("am"), Severity.WARNING, {}, "test", ts("2025-01-15T10:00:00Z")
    )
    await repo.save(alert)

    user_id = UserId.new()
    alert.acknowledge(user_id, ts("2025-01-15T10:01:00Z"))
    await repo.save(alert)

    found = await repo.find_by_id(str(alert.id))
    assert found.status is Status.ACKNOWLEDGED
    assert found.acknowledged_by == user_id
    assert len(await repo.find_by_filter(AlertFilter())) == 1


@pytest.mark.asyncio
async def test_alert_find_by_filter_status(db):
    repo = SqliteAlertRepository(db)
    await repo.save(make_alert("api"))

    firing = await repo.find_by_filter(AlertFilter(status=Status.FIRING, page=1, per_page=50))
    assert len(firing) == 1

    resolved = await repo.find_by_filter(
        AlertFilter(status=Status.RESOLVED, page=1, per_page=50)
    )
    assert resolved == []


@pytest.mark.asyncio
async def test_alert_find_by_filter_severity_source_and_search(db):
    repo = SqliteAlertRepository(db)
    api = make_alert("api", severity=Severity.CRITICAL, source="alertmanager")
    payments = make_alert("payments", severity=Severity.WARNING, source="datadog")
    await repo.save(api)
    await repo.save(payments)

    by_severity = await repo.find_by_filter(AlertFilter(severity=Severity.WARNING))
    assert [a.id for a in by_severity] == [payments.id]

    by_source = await repo.find_by_filter(AlertFilter(source="alertmanager"))
    assert [a.id for a in by_source] == [api.id]

    by_search = await repo.find_by_filter(AlertFilter(search="payments"))
    assert [a.id for a in by_search] == [payments.id]


@pytest.mark.asyncio
async def test_alert_find_by_filter_orders_newest_first_and_pages(db):
    repo = SqliteAlertRepository(db)
    oldest = make_alert("a", at="2025-01-15T10:00:00Z")
    middle = make_alert("b", at="2025-01-15T11:00:00Z")
    newest = make_alert("c", at="2025-01-15T12:00:00Z")
    for alert in (middle, oldest, newest):
        await repo.save(alert)

    everything = await repo.find_by_filter(AlertFilter())
    assert [a.id for a in everything] == [newest.id, middle.id, oldest.id]

    first_page = await repo.find_by_filter(AlertFilter(page=1, per_page=2))
    assert [a.id for a in first_page] == [newest.id, middle.id]

    second_page = await repo.find_by_filter(AlertFilter(page=2, per_page=2))
    assert [a.id for a in second_page] == [oldest.id]

    page_zero = await repo.find_by_filter(AlertFilter(page=0, per_page=2))
    assert [a.id for a in page_zero] == [newest.id, middle.id]


@pytest.mark.asyncio
async def test_alert_repository_on_closed_db_raises():
    database = await SqliteDb.connect(":memory:")
    repo = SqliteAlertRepository(database)
    await database.close()
    with pytest.raises(PortConnectionError):
        await repo.save(make_alert("api"))


# --- groups ---


@pytest.mark.asyncio
async def test_group_save_and_find_active_by_key(db):
    repo = SqliteAlertGroupRepository(db)
    group = AlertGroup.create(
        AlertId.new(), "am:api", timedelta(seconds=30), ts("2025-01-15T10:00:00Z")
    )
    await repo.save(group)

    found = await repo.find_active_by_key("am:api")
    assert found.id == group.id
    assert found.member_count() == 1


@pytest.mark.asyncio
async def test_group_find_active_by_key_returns_none(db):
    repo = SqliteAlertGroupRepository(db)
    assert await repo.find_active_by_key("nonexistent") is None


@pytest.mark.asyncio
async def test_group_save_updates_existing(db):
    repo = SqliteAlertGroupRepository(db)
    group = AlertGroup.create(
        AlertId.new(), "am:api", timedelta(seconds=30), ts("2025-01-15T10:00:00Z")
    )
    await repo.save(group)

    group.add_member(AlertId.new(), ts("2025-01-15T10:00:05Z"))
    await repo.save(group)

    found = await repo.find_active_by_key("am:api")
    assert found.member_count() == 2
    assert found.last_added_at == ts("2025-01-15T10:00:05Z")


# --- schedules ---


@pytest.mark.asyncio
async def test_schedule_save_and_find_by_id(db):
    repo = SqliteScheduleRepository(db)
    schedule = make_schedule("platform")
    await repo.save(schedule)

    found = await repo.find_by_id(str(schedule.id))
    assert found.name == "platform"
    assert len(found.participants) == 2
    at = ts("2025-01-15T14:00:00Z")
    assert found.who_is_on_call(at) == schedule.who_is_on_call(at)


@pytest.mark.asyncio
async def test_schedule_find_by_id_returns_none(db):
    repo = SqliteScheduleRepository(db)
    assert await repo.find_by_id("00000000-0000-0000-0000-000000000000") is None


@pytest.mark.asyncio
async def test_schedule_list_all_returns_saved(db):
    repo = SqliteScheduleRepository(db)
    await repo.save(make_schedule("team-a"))
    await repo.save(make_schedule("team-b"))

    all_schedules = await repo.list_all()
    assert len(all_schedules) == 2
    assert sorted(s.name for s in all_schedules) == ["team-a", "team-b"]


# --- events ---


@pytest.mark.asyncio
async def test_publish_stores_events(db):
    publisher = SqliteEventPublisher(db)
    events = [
        AlertReceived(
            alert_id=AlertId.new(),
            source="alertmanager",
            severity=Severity.CRITICAL,
            occurred_at=ts("2025-01-15T10:00:00Z"),
        ),
        AlertReceived(
            alert_id=AlertId.new(),
            source="datadog",
            severity=Severity.WARNING,
            occurred_at=ts("2025-01-15T10:01:00Z"),
        ),
    ]
    await publisher.publish(events)

    async with db.connection().execute(
        "SELECT event_type, data FROM events ORDER BY id"
    ) as cursor:
        rows = await cursor.fetchall()
    assert len(rows) == 2
    assert [row[0] for row in rows] == ["alert.received", "alert.received"]
    assert [json.loads(row[1]) for row in rows] == [e.to_dict() for e in events]


@pytest.mark.asyncio
async def test_publish_nothing_stores_nothing(db):
    publisher = SqliteEventPublisher(db)
    await publisher.publish([])
    async with db.connection().execute("SELECT COUNT(*) FROM events") as cursor:
        row = await cursor.fetchone()
    assert row[0] == 0