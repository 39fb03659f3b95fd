"""Repository layer tests for the history/stats store.

Tests focus on:
- Newest-first history listing
- Upsert (last writer wins) semantics
- Deleting history never touching lifetime stats
- Monotonic lifetime stats until an explicit reset
- Startup recovery of interrupted entries
"""

from datetime import datetime, timedelta, timezone

import pytest

from shotlab.models.history import HistoryEntry, HistoryStatus
from shotlab.models.lifetime_stats import StatsIncrement
from shotlab.models.settings import AIModel
from shotlab.repositories.history import INTERRUPTED_MESSAGE, HistoryRepository
from shotlab.repositories.lifetime_stats import LifetimeStatsRepository

IMAGE = "data:image/png;base64,AA=="


def entry_at(minutes_ago: int, **kwargs) -> HistoryEntry:
    timestamp = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago)
    return HistoryEntry(original_url=IMAGE, timestamp=timestamp, **kwargs)


@pytest.mark.asyncio
async def test_get_all_returns_newest_first(session):
    repo = HistoryRepository(session)
    old, newest, middle = entry_at(30), entry_at(0), entry_at(10)
    await repo.put_many([old, newest, middle])
    await session.commit()

    entries = await repo.get_all()

    assert [entry.id for entry in entries] == [newest.id, middle.id, old.id]


@pytest.mark.asyncio
async def test_put_replaces_entry_with_same_id(session):
    repo = HistoryRepository(session)
    entry = entry_at(0, status=HistoryStatus.PROCESSING)
    await repo.put(entry)
    await session.commit()

    replacement = HistoryEntry(
        id=entry.id,
        original_url=IMAGE,
        timestamp=entry.timestamp,
        status=HistoryStatus.FAILED,
        error="boom",
    )
    await repo.put(replacement)
    await session.commit()

    entries = await repo.get_all()
    assert len(entries) == 1
    assert entries[0].status == HistoryStatus.FAILED
    assert entries[0].error == "boom"


@pytest.mark.asyncio
async def test_delete_is_idempotent(session):
    repo = HistoryRepository(session)
    entry = await repo.put(entry_at(0))
    await session.commit()

    assert await repo.delete(entry.id) is True
    assert await repo.delete(entry.id) is False
    assert await repo.get_by_id(entry.id) is None


@pytest.mark.asyncio
async def test_deleting_history_leaves_lifetime_stats_unchanged(uow_factory):
    async with await uow_factory() as uow:
        await uow.history.put_many([entry_at(0), entry_at(1)])
        await uow.stats.increment(
            StatsIncrement(
                model=AIModel.FAST_IMAGE,
                images_generated=2,
                input_tokens=2000,
                output_tokens=2048,
                cost=0.01,
            )
        )

    async with await uow_factory() as uow:
        assert await uow.history.clear() == 2

    async with await uow_factory() as uow:
        stats = await uow.stats.get()
        assert await uow.history.get_all() == []

    assert stats.total_images_generated == 2
    assert stats.total_input_tokens == 2000
    assert stats.total_output_tokens == 2048
    assert stats.total_cost == pytest.approx(0.01)


@pytest.mark.asyncio
async def test_lifetime_stats_only_grow_and_track_models(session):
    repo = LifetimeStatsRepository(session)
    previous = 0.0

    for model, count in [(AIModel.FAST_IMAGE, 3), (AIModel.PRO_IMAGE, 1), (AIModel.FAST_IMAGE, 0)]:
        stats = await repo.increment(
            StatsIncrement(model=model, images_generated=count, cost=0.002 * count)
        )
        assert stats.total_cost >= previous
        previous = stats.total_cost

    await session.commit()
    stats = await repo.get()
    assert stats.total_images_generated == 4
    assert stats.model_counts[AIModel.FAST_IMAGE.value] == 3
    assert stats.model_counts[AIModel.PRO_IMAGE.value] == 1
    assert stats.model_counts[AIModel.VIDEO.value] == 0


@pytest.mark.asyncio
async def test_reset_zeroes_every_counter(session):
    repo = LifetimeStatsRepository(session)
    await repo.increment(
        StatsIncrement(
            model=AIModel.VIDEO, images_generated=1, input_tokens=2000, output_tokens=7500, cost=0.2
        )
    )
    await session.commit()

    stats = await repo.reset()
    await session.commit()

    assert stats.total_images_generated == 0
    assert stats.total_input_tokens == 0
    assert stats.total_output_tokens == 0
    assert stats.total_cost == 0
    assert set(stats.model_counts.values()) == {0}


@pytest.mark.asyncio
async def test_mark_interrupted_fails_only_processing_entries(session):
    repo = HistoryRepository(session)
    processing = entry_at(0, status=HistoryStatus.PROCESSING)
    completed = entry_at(1, status=HistoryStatus.COMPLETED, processed_url=IMAGE)
    idle = entry_at(2, status=HistoryStatus.IDLE)
    await repo.put_many([processing, completed, idle])
    await session.commit()

    count = await repo.mark_interrupted()
    await session.commit()

    assert count == 1
    session.expire_all()
    by_id = {entry.id: entry for entry in await repo.get_all()}
    assert by_id[processing.id].status == HistoryStatus.FAILED
    assert by_id[processing.id].error == INTERRUPTED_MESSAGE
    assert by_id[completed.id].status == HistoryStatus.COMPLETED
    assert by_id[idle.id].status == HistoryStatus.IDLE


@pytest.mark.asyncio
async def test_get_by_batch(session):
    repo = HistoryRepository(session)
    await repo.put_many([entry_at(0, batch_id="a"), entry_at(1, batch_id="a"), entry_at(2)])
    await session.commit()

    assert len(await repo.get_by_batch("a")) == 2
