"""Unit of Work for the history/stats store.

One UnitOfWork is one transaction: a batch's terminal entries and its lifetime
stats increment are written together or not at all.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shotlab.repositories.history import HistoryRepository
from shotlab.repositories.lifetime_stats import LifetimeStatsRepository

logger = structlog.get_logger()


class UnitOfWork:
    """Transaction scope exposing the `history` and `stats` repositories.

    Example:
        async with await uow_factory() as uow:
            entries = await uow.history.get_by_ids(entry_ids)
            await uow.history.put_many(finished)
            await uow.stats.increment(delta)
        # committed here; rolled back instead if the block raised
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.history = HistoryRepository(session)
        self.stats = LifetimeStatsRepository(session)

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Commit on clean exit, roll back on error; the session is always closed.

        Returns:
            False so that exceptions propagate to the caller
        """
        try:
            if exc_type is not None:
                await self.session.rollback()
                logger.info("transaction.rolled_back", exc_type=exc_type.__name__)
            else:
                await self.session.commit()
                logger.debug("transaction.committed")
        finally:
            await self.session.close()
        return False


def create_uow_factory(session_factory: async_sessionmaker[AsyncSession]):
    """Build an async callable returning a fresh UnitOfWork per call.

    Usage:
        uow_factory = create_uow_factory(setup_db_session(engine))
        async with await uow_factory() as uow:
            await uow.history.put(entry)
    """

    async def new_uow() -> UnitOfWork:
        return UnitOfWork(session_factory())

    return new_uow
