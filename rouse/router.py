"""Matching alert labels to escalation policies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from rouse.ids import PolicyId


@dataclass
class Route:
    """Labels an alert must carry, and the policy it is routed to."""

    matchers: dict[str, str]
    policy_id: PolicyId = field(default_factory=PolicyId.new)


class AlertRouter:
    """Picks the first route whose matchers all agree with an alert's labels."""

    def __init__(self, routes: Iterable[Route]) -> None:
        self.routes = list(routes)

    def match_alert(self, labels: Mapping[str, str]) -> PolicyId | None:
        """The policy of the first matching route, or None."""
        return next(
            (
                route.policy_id
                for route in self.routes
                if all(labels.get(key) == value for key, value in route.matchers.items())
            ),
            None,
        )