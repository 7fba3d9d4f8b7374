from datetime import datetime, timezone

from rouse.events import (
    AlertAcknowledged,
    AlertDeduplicated,
    AlertEscalated,
    AlertReceived,
    AlertResolved,
    Channel,
    EscalationExhausted,
    NotificationFailed,
    NotificationSent,
    OnCallChanged,
    Severity,
)
from rouse.ids import AlertId, PolicyId, ScheduleId, UserId


def now():
    return datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


def all_events():
    alert_id = AlertId.new()
    return [
        AlertReceived(alert_id, "alertmanager", Severity.CRITICAL, now()),
        AlertDeduplicated(alert_id, "fp", now()),
        AlertAcknowledged(alert_id, UserId.new(), now()),
        AlertEscalated(alert_id, 2, ["alice", "bob"], now()),
        AlertResolved(alert_id, "operator", now()),
        NotificationSent(alert_id, Channel.SLACK, "#oncall", "ts-123", now()),
        NotificationFailed(alert_id, Channel.SMS, "#oncall", "boom", now()),
        OnCallChanged(ScheduleId.new(), UserId.new(), None, now()),
        EscalationExhausted(alert_id, PolicyId.new(), now()),
    ]


def test_event_types_are_unique_strings():
    types = [event.event_type() for event in all_events()]
    assert types == [
        "alert.received",
        "alert.deduplicated",
        "alert.acknowledged",
        "alert.escalated",
        "alert.resolved",
        "notification.sent",
        "notification.failed",
        "oncall.changed",
        "escalation.exhausted",
    ]
    assert len(set(types)) == len(types)


def test_events_carry_sufficient_context():
    alert_id = AlertId.new()
    event = AlertEscalated(alert_id, 2, ["alice", "bob"], now())
    assert event.event_type() == "alert.escalated"
    assert event.occurred_at == now()
    assert event.alert_id == alert_id
    assert event.step == 2
    assert len(event.targets) == 2


def test_notification_events_include_channel():
    event = NotificationSent(AlertId.new(), Channel.SLACK, "#oncall", "ts-123", now())
    assert event.event_type() == "notification.sent"
    assert event.channel is Channel.SLACK


def test_escalation_exhausted_references_policy():
    policy_id = PolicyId.new()
    event = EscalationExhausted(AlertId.new(), policy_id, now())
    assert event.policy_id == policy_id


def test_every_event_has_occurred_at():
    assert all(event.occurred_at == now() for event in all_events())


def test_to_dict_is_tagged_by_variant():
    alert_id = AlertId.new()
    event = AlertReceived(alert_id, "alertmanager", Severity.CRITICAL, now())
    assert event.to_dict() == {
        "AlertReceived": {
            "alert_id": str(alert_id),
            "source": "alertmanager",
            "severity": "Critical",
            "occurred_at": "2025-01-15T10:00:00Z",
        }
    }


def test_to_dict_handles_lists_and_missing_values():
    schedule_id = ScheduleId.new()
    user = UserId.new()
    changed = OnCallChanged(schedule_id, user, None, now()).to_dict()["OnCallChanged"]
    assert changed["previous_user"] is None
    assert changed["new_user"] == str(user)
    escalated = AlertEscalated(AlertId.new(), 2, ["alice", "bob"], now()).to_dict()
    assert escalated["AlertEscalated"]["targets"] == ["alice", "bob"]


def test_channel_values_cover_all_variants():
    assert len(Channel) == 8
    assert Channel("WhatsApp") is Channel.WHATSAPP


def test_events_compare_by_value():
    alert_id = AlertId.new()
    first = AlertResolved(alert_id, "operator", now())
    second = AlertResolved(alert_id, "operator", now())
    assert first == second
    assert first != AlertResolved(alert_id, "other", now())