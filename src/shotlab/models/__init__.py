"""SQLModel database entities and batch domain types.

Table models are imported here to ensure they're registered with SQLModel metadata
before tables are created.
"""

from shotlab.models.history import (
    CostData,
    HistoryEntry,
    HistoryStatus,
    InvalidStateTransition,
)
from shotlab.models.job import GenerationResult, JobOutcome, RenderJob, TokenUsage
from shotlab.models.lifetime_stats import LifetimeStats, StatsIncrement
from shotlab.models.settings import AIModel, GenerationSettings

__all__ = [
    "AIModel",
    "CostData",
    "GenerationResult",
    "GenerationSettings",
    "HistoryEntry",
    "HistoryStatus",
    "InvalidStateTransition",
    "JobOutcome",
    "LifetimeStats",
    "RenderJob",
    "StatsIncrement",
    "TokenUsage",
]
