"""Placing incoming alerts into groups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from rouse.alert import Alert
from rouse.grouping import AlertGroup, compute_grouping_key, should_group
from rouse.ids import GroupId
from rouse.repositories import AlertGroupRepository


class GroupingOutcome(Enum):
    """Whether an alert joined an existing group or started a new one."""

    GROUPED = "grouped"
    NEW_GROUP = "new_group"


@dataclass(frozen=True)
class GroupingResult:
    """The outcome of grouping an alert and the group it ended up in."""

    outcome: GroupingOutcome
    group_id: GroupId


class GroupingService:
    """Groups alerts sharing a key that arrive within a time window."""

    def __init__(self, groups: AlertGroupRepository, window: timedelta) -> None:
        self.groups = groups
        self.window = window

    async def process(self, alert: Alert) -> GroupingResult:
        """Add the alert to its active group if within the window, else start a group."""
        key = compute_grouping_key(alert)

        group = await self.groups.find_active_by_key(key)
        if group is not None and should_group(group, alert.created_at, self.window):
            group.add_member(alert.id, alert.created_at)
            await self.groups.save(group)
            return GroupingResult(GroupingOutcome.GROUPED, group.id)

        new_group = AlertGroup.create(alert.id, key, self.window, alert.created_at)
        await self.groups.save(new_group)
        return GroupingResult(GroupingOutcome.NEW_GROUP, new_group.id)