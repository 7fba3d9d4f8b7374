"""Alert groups and the rules that put alerts into them."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from rouse.alert import Alert
from rouse.ids import AlertId, GroupId


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_time(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).astimezone(timezone.utc)


def _whole_seconds(duration: timedelta) -> int:
    micros = duration // timedelta(microseconds=1)
    seconds = abs(micros) // 1_000_000
    return seconds if micros >= 0 else -seconds


@dataclass
class AlertGroup:
    """Alerts that share a grouping key and arrived close together in time."""

    id: GroupId
    root_alert_id: AlertId
    grouping_key: str
    window_secs: int
    created_at: datetime
    last_added_at: datetime
    member_alert_ids: list[AlertId] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        root_alert_id: AlertId,
        grouping_key: str,
        window: timedelta,
        now: datetime,
    ) -> AlertGroup:
        """Start a group whose first member is the root alert."""
        return cls(
            id=GroupId.new(),
            root_alert_id=root_alert_id,
            grouping_key=grouping_key,
            window_secs=_whole_seconds(window),
            created_at=now,
            last_added_at=now,
            member_alert_ids=[root_alert_id],
        )

    def add_member(self, alert_id: AlertId, now: datetime) -> None:
        """Add an alert to the group and note when it was added."""
        self.member_alert_ids.append(alert_id)
        self.last_added_at = now

    def member_count(self) -> int:
        """Number of alerts in the group, the root included."""
        return len(self.member_alert_ids)

    def window(self) -> timedelta:
        """The grouping window."""
        return timedelta(seconds=self.window_secs)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to JSON-ready values."""
        return {
            "id": str(self.id),
            "root_alert_id": str(self.root_alert_id),
            "member_alert_ids": [str(member) for member in self.member_alert_ids],
            "grouping_key": self.grouping_key,
            "window_secs": self.window_secs,
            "created_at": _format_time(self.created_at),
            "last_added_at": _format_time(self.last_added_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AlertGroup:
        """Rebuild a group from the output of ``to_dict``."""
        return cls(
            id=GroupId.parse(data["id"]),
            root_alert_id=AlertId.parse(data["root_alert_id"]),
            grouping_key=data["grouping_key"],
            window_secs=int(data["window_secs"]),
            created_at=_parse_time(data["created_at"]),
            last_added_at=_parse_time(data["last_added_at"]),
            member_alert_ids=[AlertId.parse(member) for member in data["member_alert_ids"]],
        )


def compute_grouping_key(alert: Alert) -> str:
    """Deterministic key from the alert's source and its ``service`` label."""
    source = alert.source.name
    service = alert.labels.get("service")
    return f"{source}:{service}" if service is not None else source


def should_group(
    existing_group: AlertGroup,
    new_alert_created_at: datetime,
    window: timedelta,
) -> bool:
    """Whether an alert created at the given time falls inside the group's window."""
    return new_alert_created_at < existing_group.last_added_at + window