"""On-call schedules: rotations, hand-off times and temporary overrides."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from rouse.errors import InvalidOverridePeriod, ScheduleRequiresParticipant
from rouse.events import DomainEvent, OnCallChanged
from rouse.ids import OverrideId, ScheduleId, UserId

_DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_SECONDS_PER_DAY = 24 * 60 * 60
_SECONDS_PER_WEEK = 7 * _SECONDS_PER_DAY


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_time(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).astimezone(timezone.utc)


def _div_toward_zero(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _whole_seconds(duration: timedelta) -> int:
    micros = duration // timedelta(microseconds=1)
    seconds = abs(micros) // 1_000_000
    return seconds if micros >= 0 else -seconds


@dataclass(frozen=True)
class HandoffTime:
    """When shifts change hands; ``day`` counts from 0 for Monday."""

    day: int
    hour: int
    minute: int

    def to_dict(self) -> dict[str, Any]:
        return {"day": _DAY_NAMES[self.day], "hour": self.hour, "minute": self.minute}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HandoffTime:
        return cls(
            day=_DAY_NAMES.index(data["day"]),
            hour=int(data["hour"]),
            minute=int(data["minute"]),
        )


@dataclass(frozen=True)
class Rotation:
    """How long each participant stays on call."""

    seconds: int
    kind: str = "Custom"

    @classmethod
    def daily(cls) -> Rotation:
        """One day per participant."""
        return cls(_SECONDS_PER_DAY, "Daily")

    @classmethod
    def weekly(cls) -> Rotation:
        """One week per participant."""
        return cls(_SECONDS_PER_WEEK, "Weekly")

    @classmethod
    def custom(cls, seconds: int) -> Rotation:
        """A shift length given in seconds."""
        return cls(int(seconds), "Custom")

    def duration(self) -> timedelta:
        """Length of one shift."""
        return timedelta(seconds=self.seconds)

    def _to_plain(self) -> Any:
        if self.kind == "Custom":
            return {"Custom": self.seconds}
        return self.kind

    @classmethod
    def _from_plain(cls, value: Any) -> Rotation:
        if value == "Daily":
            return cls.daily()
        if value == "Weekly":
            return cls.weekly()
        if isinstance(value, Mapping) and "Custom" in value:
            return cls.custom(value["Custom"])
        raise ValueError(f"unknown rotation: {value!r}")


@dataclass(frozen=True)
class ScheduleOverride:
    """A user taking over on-call duty for the half-open period [start, end)."""

    user_id: UserId
    start: datetime
    end: datetime
    id: OverrideId = field(default_factory=OverrideId.new)

    def is_active_at(self, at: datetime) -> bool:
        """Whether the override covers the given instant."""
        return self.start <= at < self.end

    def to_dict(self) -> dict[str, Any]:
        """Serialise to JSON-ready values."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "start": _format_time(self.start),
            "end": _format_time(self.end),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScheduleOverride:
        """Rebuild an override from the output of ``to_dict``."""
        return cls(
            user_id=UserId.parse(data["user_id"]),
            start=_parse_time(data["start"]),
            end=_parse_time(data["end"]),
            id=OverrideId.parse(data["id"]),
        )


@dataclass
class Schedule:
    """A rotation of participants in a time zone, with optional overrides."""

    name: str
    timezone: ZoneInfo
    rotation: Rotation
    participants: list[UserId]
    handoff: HandoffTime
    id: ScheduleId = field(default_factory=ScheduleId.new)
    overrides: list[ScheduleOverride] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.timezone, str):
            self.timezone = ZoneInfo(self.timezone)
        self.participants = list(self.participants)
        self.overrides = list(self.overrides)
        if not self.participants:
            raise ScheduleRequiresParticipant()

    def who_is_on_call(self, at: datetime) -> UserId:
        """The user on call at the given instant; the latest active override wins."""
        for ovr in reversed(self.overrides):
            if ovr.is_active_at(at):
                return ovr.user_id
        return self._rotation_on_call(at)

    def _rotation_on_call(self, at: datetime) -> UserId:
        rotation_secs = _whole_seconds(self.rotation.duration())
        # Shifts are counted from a fixed Monday midnight in the schedule's zone.
        epoch = datetime(2020, 1, 6, tzinfo=self.timezone)
        elapsed = _whole_seconds(
            at.astimezone(timezone.utc) - epoch.astimezone(timezone.utc)
        )
        index = _div_toward_zero(elapsed, rotation_secs) % len(self.participants)
        return self.participants[index]

    def add_override(self, ovr: ScheduleOverride, now: datetime) -> list[DomainEvent]:
        """Add an override; its end must come after its start."""
        if ovr.end <= ovr.start:
            raise InvalidOverridePeriod()
        self.overrides.append(ovr)
        return [
            OnCallChanged(
                schedule_id=self.id,
                new_user=ovr.user_id,
                previous_user=None,
                occurred_at=now,
            )
        ]

    def remove_override(self, override_id: OverrideId, now: datetime) -> list[DomainEvent]:
        """Remove an override by id; removing an unknown id changes nothing."""
        found = next((o for o in self.overrides if o.id == override_id), None)
        if found is None:
            return []
        self.overrides.remove(found)
        return [
            OnCallChanged(
                schedule_id=self.id,
                new_user=self.who_is_on_call(now),
                previous_user=None,
                occurred_at=now,
            )
        ]

    def to_dict(self) -> dict[str, Any]:
        """Serialise to JSON-ready values."""
        return {
            "id": str(self.id),
            "name": self.name,
            "timezone": self.timezone.key,
            "rotation": self.rotation._to_plain(),
            "participants": [str(user) for user in self.participants],
            "handoff": self.handoff.to_dict(),
            "overrides": [ovr.to_dict() for ovr in self.overrides],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schedule:
        """Rebuild a schedule from the output of ``to_dict``."""
        return cls(
            name=data["name"],
            timezone=ZoneInfo(data["timezone"]),
            rotation=Rotation._from_plain(data["rotation"]),
            participants=[UserId.parse(user) for user in data["participants"]],
            handoff=HandoffTime.from_dict(data["handoff"]),
            id=ScheduleId.parse(data["id"]),
            overrides=[ScheduleOverride.from_dict(o) for o in data["overrides"]],
        )