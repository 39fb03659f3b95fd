"""pytest fixtures for shotlab tests.

Provides:
- engine: Function-scoped SQLite engine (temporary file) with tables created
- session: Function-scoped database session
- uow_factory: Function-scoped UnitOfWork factory
- config: Application settings for tests (no real credential)
- png_data_url / logo_data_url: Small Pillow-generated images as data URLs
- FakeBackend / instant_sleep: Generative backend double and a sleep that never waits
"""

import os

os.environ.setdefault("APP_ENV", "test")

from io import BytesIO  # noqa: E402
from typing import AsyncGenerator, Callable, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession  # noqa: E402

from shotlab.core.config import Settings  # noqa: E402
from shotlab.core.database import create_engine, init_db, setup_db_session  # noqa: E402
from shotlab.models.job import GenerationResult, TokenUsage  # noqa: E402
from shotlab.services.media import to_data_url  # noqa: E402
from shotlab.uow import create_uow_factory  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Provide a fresh SQLite database per test."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'shotlab.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = setup_db_session(engine)
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def uow_factory(engine):
    """Provide function-scoped UnitOfWork factory bound to the test database."""
    return create_uow_factory(setup_db_session(engine))


@pytest.fixture
def config() -> Settings:
    return Settings(  # type: ignore[call-arg]
        APP_ENV="test",
        GEMINI_API_KEY="test-key",
        MAX_RETRIES=5,
        RETRY_BASE_DELAY_SECONDS=1.0,
        RETRY_JITTER_SECONDS=1.0,
        DISPATCH_JITTER_SECONDS=2.0,
        VIDEO_POLL_INTERVAL_SECONDS=5.0,
        VIDEO_POLL_MAX_ATTEMPTS=3,
    )


def make_png(size: tuple[int, int], color: tuple[int, int, int, int]) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_data_url() -> str:
    return to_data_url(make_png((200, 100), (255, 255, 255, 255)), "image/png")


@pytest.fixture
def logo_data_url() -> str:
    return to_data_url(make_png((40, 20), (255, 0, 0, 255)), "image/png")


class FakeBackend:
    """Generative backend double.

    `fail` decides per call: return an exception to raise it, or None to succeed.
    """

    def __init__(
        self,
        fail: Optional[Callable[[str, int], Optional[Exception]]] = None,
        usage: TokenUsage = TokenUsage(input_tokens=1058, output_tokens=1024),
    ):
        self.fail = fail
        self.usage = usage
        self.prompts: list[str] = []
        self.seeds: list[Optional[int]] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def _next(self, prompt: str) -> None:
        self.prompts.append(prompt)
        if self.fail is not None:
            error = self.fail(prompt, len(self.prompts))
            if error is not None:
                raise error

    async def generate_image(self, prompt, product_image, settings, seed=None):
        self._next(prompt)
        self.seeds.append(seed)
        return GenerationResult(
            artifact_url=to_data_url(make_png((64, 64), (0, 128, 255, 255))),
            usage=self.usage,
            seed=seed,
        )

    async def generate_video(self, prompt, product_image, settings):
        self._next(prompt)
        return GenerationResult(
            artifact_url=to_data_url(b"fake-mp4", "video/mp4"),
            usage=TokenUsage(input_tokens=2000, output_tokens=1500 * settings.video_duration),
            is_video=True,
        )


@pytest.fixture
def fake_backend_cls():
    return FakeBackend


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def instant_sleep(sleeps):
    """Sleep replacement that records the requested delay and returns immediately."""

    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep
