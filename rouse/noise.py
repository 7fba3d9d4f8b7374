"""Noise tracking: how often an alert fires and how operators respond to it."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

_NOISE_THRESHOLD = 0.8
_SUPPRESSION_THRESHOLD = 0.95
_REFLEXIVE_ACK = timedelta(seconds=5)
_QUICK_RESOLVE = timedelta(seconds=60)


def _whole_seconds(duration: timedelta) -> int:
    """Whole seconds of a duration, truncated toward zero."""
    micros = duration // timedelta(microseconds=1)
    seconds = abs(micros) // 1_000_000
    return seconds if micros >= 0 else -seconds


def _div_toward_zero(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


@dataclass
class NoiseScore:
    """Fire and response counters for one alert fingerprint."""

    fingerprint: str
    total_fires: int = 0
    dismissed_count: int = 0
    acted_on_count: int = 0
    avg_time_to_ack_secs: int = 0

    def record_fire(self) -> None:
        """Count one more firing."""
        self.total_fires += 1

    def record_dismiss(self) -> None:
        """Count one response that dismissed the alert."""
        self.dismissed_count += 1

    def record_action(self) -> None:
        """Count one response that acted on the alert."""
        self.acted_on_count += 1

    def update_avg_ack_time(self, ack_duration: timedelta) -> None:
        """Fold a new time-to-acknowledge into the running average."""
        count = self.dismissed_count + self.acted_on_count
        seconds = _whole_seconds(ack_duration)
        if count == 0:
            self.avg_time_to_ack_secs = seconds
        else:
            previous_total = self.avg_time_to_ack_secs * (count - 1)
            self.avg_time_to_ack_secs = _div_toward_zero(previous_total + seconds, count)

    def score(self) -> float:
        """Share of firings that were dismissed: 0.0 is useful, 1.0 is pure noise."""
        if self.total_fires == 0:
            return 0.0
        return self.dismissed_count / self.total_fires

    def avg_time_to_ack(self) -> timedelta:
        """Average time to acknowledge."""
        return timedelta(seconds=self.avg_time_to_ack_secs)

    def is_noise(self) -> bool:
        """Whether the alert is mostly dismissed."""
        return self.score() > _NOISE_THRESHOLD

    def suggest_suppression(self) -> bool:
        """Whether the alert is dismissed so often it should be suppressed."""
        return self.score() > _SUPPRESSION_THRESHOLD


def classify_response(time_to_ack: timedelta, time_to_resolve: timedelta | None) -> bool:
    """Return True if the response was a dismissal, False if it was acted upon.

    A response is a dismissal when the acknowledgement was reflexive (under five
    seconds) or when the alert was resolved within a minute of acknowledgement.
    """
    if time_to_ack < _REFLEXIVE_ACK:
        return True
    if time_to_resolve is not None and time_to_resolve < _QUICK_RESOLVE:
        return True
    return False