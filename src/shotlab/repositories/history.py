"""History repository for shotlab.

Provides data access methods for HistoryEntry entities.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shotlab.models.history import HistoryEntry, HistoryStatus

INTERRUPTED_MESSAGE = "Generation interrupted before completion"


class HistoryRepository:
    """Repository for HistoryEntry entities.

    Writes are full-entry replacements keyed by id (last writer wins).
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self.session = session

    async def put(self, entry: HistoryEntry) -> HistoryEntry:
        """Insert or replace an entry by id.

        Args:
            entry: Entry to persist

        Returns:
            The persisted entry instance bound to this session
        """
        merged = await self.session.merge(entry)
        await self.session.flush()
        return merged

    async def put_many(self, entries: list[HistoryEntry]) -> list[HistoryEntry]:
        """Insert or replace several entries in one flush."""
        merged = [await self.session.merge(entry) for entry in entries]
        await self.session.flush()
        return merged

    async def get_by_id(self, entry_id: str) -> HistoryEntry | None:
        """Retrieve entry by id.

        Args:
            entry_id: Entry identifier

        Returns:
            HistoryEntry if found, None otherwise
        """
        result = await self.session.execute(
            select(HistoryEntry).where(HistoryEntry.id == entry_id)  # type: ignore[arg-type]
        )
        return result.scalar_one_or_none()

    async def get_by_ids(self, entry_ids: list[str]) -> dict[str, HistoryEntry]:
        """Retrieve several entries keyed by id (missing ids are omitted)."""
        if not entry_ids:
            return {}
        result = await self.session.execute(
            select(HistoryEntry).where(HistoryEntry.id.in_(entry_ids))  # type: ignore[attr-defined]
        )
        return {entry.id: entry for entry in result.scalars().all()}

    async def get_all(self) -> list[HistoryEntry]:
        """Retrieve all entries, newest first by timestamp."""
        result = await self.session.execute(
            select(HistoryEntry).order_by(
                HistoryEntry.timestamp.desc(),  # type: ignore[attr-defined]
                HistoryEntry.id.asc(),  # type: ignore[attr-defined]
            )
        )
        return list(result.scalars().all())

    async def get_by_batch(self, batch_id: str) -> list[HistoryEntry]:
        """Retrieve entries of one batch (order is not significant)."""
        result = await self.session.execute(
            select(HistoryEntry).where(HistoryEntry.batch_id == batch_id)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def delete(self, entry_id: str) -> bool:
        """Delete an entry (idempotent).

        Args:
            entry_id: Entry identifier

        Returns:
            True if the entry was deleted, False if it did not exist
        """
        result = await self.session.execute(
            delete(HistoryEntry).where(HistoryEntry.id == entry_id)  # type: ignore[arg-type]
        )
        await self.session.flush()
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def clear(self) -> int:
        """Delete every entry.

        Returns:
            Number of deleted entries
        """
        result = await self.session.execute(delete(HistoryEntry))
        await self.session.flush()
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def mark_interrupted(self) -> int:
        """Fail every entry still marked processing.

        Used at startup: a process that died mid-batch leaves entries in
        processing; they are never retried automatically.

        Query:
            UPDATE history_entries
            SET status = 'failed', error = 'Generation interrupted ...'
            WHERE status = 'processing'

        Returns:
            Number of entries marked failed
        """
        result = await self.session.execute(
            update(HistoryEntry)
            .where(HistoryEntry.status == HistoryStatus.PROCESSING)  # type: ignore[arg-type]
            .values(status=HistoryStatus.FAILED, error=INTERRUPTED_MESSAGE)
        )
        await self.session.flush()
        return result.rowcount or 0  # type: ignore[attr-defined]
