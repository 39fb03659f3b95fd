"""LifetimeStats repository for shotlab.

Provides read/increment/reset access to the cumulative spend singleton.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shotlab.models.lifetime_stats import (
    LIFETIME_STATS_KEY,
    LifetimeStats,
    StatsIncrement,
    empty_model_counts,
)


class LifetimeStatsRepository:
    """Repository for the LifetimeStats singleton.

    The row is created lazily on first read. Increments must be non-negative,
    so totals never decrease except through reset().
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self.session = session

    async def _get_or_create(self) -> LifetimeStats:
        result = await self.session.execute(
            select(LifetimeStats).where(LifetimeStats.key == LIFETIME_STATS_KEY)  # type: ignore[arg-type]
        )
        stats = result.scalar_one_or_none()
        if stats is None:
            stats = LifetimeStats(key=LIFETIME_STATS_KEY, model_counts=empty_model_counts())
            self.session.add(stats)
            await self.session.flush()
        return stats

    async def get(self) -> LifetimeStats:
        """Return current lifetime statistics (zeroed if never written)."""
        return await self._get_or_create()

    async def increment(self, delta: StatsIncrement) -> LifetimeStats:
        """Add one batch's successful totals.

        Args:
            delta: Aggregated increment tagged with the model used

        Returns:
            Updated statistics

        Raises:
            ValueError: If any component of the increment is negative
        """
        if min(delta.images_generated, delta.input_tokens, delta.output_tokens) < 0 or delta.cost < 0:
            raise ValueError("Lifetime stats increments must be non-negative")

        stats = await self._get_or_create()
        stats.total_images_generated += delta.images_generated
        stats.total_input_tokens += delta.input_tokens
        stats.total_output_tokens += delta.output_tokens
        stats.total_cost += delta.cost

        # Reassign so the JSON column is flagged dirty
        counts = {**empty_model_counts(), **(stats.model_counts or {})}
        counts[delta.model.value] = counts.get(delta.model.value, 0) + delta.images_generated
        stats.model_counts = counts
        stats.updated_at = datetime.now(timezone.utc)

        self.session.add(stats)
        await self.session.flush()
        return stats

    async def reset(self) -> LifetimeStats:
        """Zero every counter (explicit user action only)."""
        stats = await self._get_or_create()
        stats.total_images_generated = 0
        stats.total_input_tokens = 0
        stats.total_output_tokens = 0
        stats.total_cost = 0.0
        stats.model_counts = empty_model_counts()
        stats.updated_at = datetime.now(timezone.utc)
        self.session.add(stats)
        await self.session.flush()
        return stats
