"""Tests for the stats maintenance CLI."""

import pytest

from shotlab.cli.stats import async_main, parse_args
from shotlab.core.database import create_engine, init_db, setup_db_session
from shotlab.models.history import HistoryEntry, HistoryStatus
from shotlab.models.lifetime_stats import StatsIncrement
from shotlab.models.settings import AIModel
from shotlab.uow import create_uow_factory


def test_parse_args_defaults_to_show():
    args = parse_args([])

    assert args.command == "show"
    assert args.yes is False
    assert args.verbose is False


def test_parse_args_rejects_unknown_command():
    with pytest.raises(SystemExit):
        parse_args(["explode"])


@pytest.fixture(autouse=True)
def keep_test_logging(monkeypatch):
    # Console logging would bind loggers to the captured stdout
    monkeypatch.setattr("shotlab.cli.stats.configure_logging", lambda settings: None)


@pytest.fixture
def database_url(tmp_path, monkeypatch) -> str:
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    return url


async def seed_database(url: str) -> None:
    engine = create_engine(url)
    await init_db(engine)
    uow_factory = create_uow_factory(setup_db_session(engine))
    async with await uow_factory() as uow:
        await uow.stats.increment(
            StatsIncrement(model=AIModel.PRO_IMAGE, images_generated=2, cost=0.27)
        )
        await uow.history.put(
            HistoryEntry(original_url="data:image/png;base64,AA==", status=HistoryStatus.PROCESSING)
        )
    await engine.dispose()


@pytest.mark.asyncio
async def test_show_prints_lifetime_stats(database_url, capsys):
    await seed_database(database_url)

    assert await async_main(["show"]) == 0

    output = capsys.readouterr().out
    assert "Units generated: 2" in output
    assert AIModel.PRO_IMAGE.value in output


@pytest.mark.asyncio
async def test_reset_requires_confirmation(database_url, capsys):
    assert await async_main(["reset"]) == 1
    assert "--yes" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_reset_with_confirmation(database_url, capsys):
    await seed_database(database_url)

    assert await async_main(["reset", "--yes"]) == 0
    assert "Units generated: 0" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_recover_fails_processing_entries(database_url, capsys):
    await seed_database(database_url)

    assert await async_main(["recover"]) == 0
    assert "Interrupted entries marked failed: 1" in capsys.readouterr().out
