"""Repository layer for shotlab.

Provides data access abstractions for the history/stats store.
No base classes - each repository is self-contained.
"""

from shotlab.repositories.history import HistoryRepository
from shotlab.repositories.lifetime_stats import LifetimeStatsRepository

__all__ = [
    "HistoryRepository",
    "LifetimeStatsRepository",
]
