"""Managing schedules and answering who is on call."""

from __future__ import annotations

from datetime import datetime

from rouse.errors import NotFound
from rouse.ids import OverrideId, ScheduleId, UserId
from rouse.repositories import EventPublisher, ScheduleRepository
from rouse.schedule import Schedule, ScheduleOverride


class ScheduleService:
    """Stores schedules, applies overrides and publishes the resulting events."""

    def __init__(self, schedules: ScheduleRepository, events: EventPublisher) -> None:
        self.schedules = schedules
        self.events = events

    async def _load(self, schedule_id: str) -> Schedule:
        schedule = await self.schedules.find_by_id(schedule_id)
        if schedule is None:
            raise NotFound()
        return schedule

    async def create_schedule(self, schedule: Schedule) -> ScheduleId:
        """Store a new schedule and return its id."""
        await self.schedules.save(schedule)
        return schedule.id

    async def who_is_on_call(self, schedule_id: str, at: datetime) -> UserId:
        """The user on call in the schedule at the given instant."""
        schedule = await self._load(schedule_id)
        return schedule.who_is_on_call(at)

    async def add_override(
        self, schedule_id: str, ovr: ScheduleOverride, now: datetime
    ) -> None:
        """Add an override to a schedule, save it and publish the change."""
        schedule = await self._load(schedule_id)
        events = schedule.add_override(ovr, now)
        await self.schedules.save(schedule)
        await self.events.publish(events)

    async def remove_override(
        self, schedule_id: str, override_id: str, now: datetime
    ) -> None:
        """Remove an override; saves and publishes only if something was removed."""
        schedule = await self._load(schedule_id)
        ovr_id = OverrideId.parse(override_id)
        events = schedule.remove_override(ovr_id, now)
        if events:
            await self.schedules.save(schedule)
            await self.events.publish(events)