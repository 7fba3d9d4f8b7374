"""Tracking how noisy alerts are from the way operators respond to them."""

from __future__ import annotations

from datetime import datetime

from rouse.noise import NoiseScore, classify_response
from rouse.repositories import NoiseRepository


class NoiseService:
    """Records firings and responses per fingerprint and reports noisy alerts."""

    def __init__(self, noise_repo: NoiseRepository) -> None:
        self.noise_repo = noise_repo

    async def record_fire(self, fingerprint: str) -> None:
        """Record one more firing of the alert with this fingerprint."""
        score = await self.noise_repo.get_or_create(fingerprint)
        score.record_fire()
        await self.noise_repo.save(score)

    async def record_response(
        self,
        fingerprint: str,
        created_at: datetime,
        acknowledged_at: datetime | None,
        resolved_at: datetime,
    ) -> None:
        """Classify the response to a resolved alert as a dismissal or an action."""
        score = await self.noise_repo.get_or_create(fingerprint)

        if acknowledged_at is not None:
            time_to_ack = acknowledged_at - created_at
            time_to_resolve = resolved_at - acknowledged_at
            dismissed = classify_response(time_to_ack, time_to_resolve)
        else:
            dismissed = classify_response(resolved_at - created_at, None)

        if dismissed:
            score.record_dismiss()
        else:
            score.record_action()

        if acknowledged_at is not None:
            score.update_avg_ack_time(acknowledged_at - created_at)

        await self.noise_repo.save(score)

    async def get_noisy_alerts(self, min_fires: int) -> list[NoiseScore]:
        """Scores with at least ``min_fires`` firings, noisiest first."""
        return await self.noise_repo.get_noisiest(min_fires)