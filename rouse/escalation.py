"""Escalation policies, their steps and whom each step reaches."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from rouse.errors import PolicyRequiresStep, StepRequiresChannel, StepRequiresTarget
from rouse.events import Channel, DomainEvent
from rouse.ids import PolicyId, ScheduleId, TeamId, UserId


class OnCallModifier(Enum):
    """Which on-call person of a schedule is meant."""

    CURRENT = "Current"
    NEXT = "Next"


@dataclass(frozen=True)
class OnCallTarget:
    """Whoever is on call in a schedule."""

    schedule_id: ScheduleId
    modifier: OnCallModifier = OnCallModifier.CURRENT


@dataclass(frozen=True)
class UserTarget:
    """A single user."""

    user_id: UserId


@dataclass(frozen=True)
class TeamTarget:
    """Every member of a team."""

    team_id: TeamId


EscalationTarget = Union[OnCallTarget, UserTarget, TeamTarget]


@dataclass(frozen=True)
class EscalationStep:
    """One step: after a wait, notify the targets over the channels."""

    order: int
    wait_seconds: int
    targets: tuple[EscalationTarget, ...] = ()
    channels: tuple[Channel, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))
        object.__setattr__(self, "channels", tuple(self.channels))


@dataclass
class EscalationPolicy:
    """An ordered list of steps, optionally repeated."""

    name: str
    steps: list[EscalationStep]
    repeat_count: int = 0
    id: PolicyId = field(default_factory=PolicyId.new)

    def __post_init__(self) -> None:
        self.steps = list(self.steps)
        if not self.steps:
            raise PolicyRequiresStep()

    @classmethod
    def _from_steps(
        cls, name: str, steps: Iterable[EscalationStep], repeat_count: int
    ) -> EscalationPolicy:
        return cls(name=name, steps=list(steps), repeat_count=repeat_count)

    def next_step(self, current: int, repetition: int) -> EscalationStep | None:
        """The step after ``current``, looping to the first while repeats remain."""
        following = current + 1
        if following < len(self.steps):
            return self.steps[following]
        if repetition < self.repeat_count:
            return self.steps[0]
        return None

    def add_step(self, step: EscalationStep) -> list[DomainEvent]:
        """Append a step; it must have at least one target and one channel."""
        if not step.targets:
            raise StepRequiresTarget()
        if not step.channels:
            raise StepRequiresChannel()
        self.steps.append(step)
        return []

    def first_step(self) -> EscalationStep:
        """The step that fires first."""
        return self.steps[0]