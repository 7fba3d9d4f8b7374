"""Typed identifiers backed by random UUIDs."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TypeVar

from rouse.errors import InvalidId

_IdT = TypeVar("_IdT", bound="EntityId")


@dataclass(frozen=True)
class EntityId:
    """A UUID identifier; ids of different kinds never compare equal."""

    value: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def new(cls: type[_IdT]) -> _IdT:
        """Return a fresh random identifier."""
        return cls(uuid.uuid4())

    @classmethod
    def parse(cls: type[_IdT], text: str) -> _IdT:
        """Parse a UUID text, raising InvalidId if it is not one."""
        try:
            return cls(uuid.UUID(text))
        except (ValueError, TypeError, AttributeError) as exc:
            raise InvalidId(cls.__name__) from exc

    def __str__(self) -> str:
        return str(self.value)


class AlertId(EntityId):
    """Identifies an alert."""


class UserId(EntityId):
    """Identifies a user."""


class ScheduleId(EntityId):
    """Identifies an on-call schedule."""


class PolicyId(EntityId):
    """Identifies an escalation policy."""


class TeamId(EntityId):
    """Identifies a team."""


class GroupId(EntityId):
    """Identifies an alert group."""


class OverrideId(EntityId):
    """Identifies a schedule override."""