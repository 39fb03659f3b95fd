"""Database session factory setup."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel


def create_engine(db_url: str) -> AsyncEngine:
    """Create async engine for the history/stats store.

    In-memory SQLite URLs share a single connection so every session sees the
    same database.

    Args:
        db_url: SQLAlchemy async URL (sqlite+aiosqlite://... or postgresql+psycopg://...)

    Returns:
        Configured async engine
    """
    if db_url.startswith("sqlite") and (":memory:" in db_url or db_url.endswith("://")):
        return create_async_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    return create_async_engine(
        db_url,
        pool_pre_ping=True,  # Verify connections before using
        echo=False,  # Don't log SQL queries (use structlog instead)
    )


def setup_db_session(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async database session factory.

    Args:
        engine: Async engine from create_engine()

    Returns:
        Async session factory for creating database sessions
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Prevent lazy loading issues after commit
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables registered on SQLModel metadata."""
    # Import models so their tables are registered
    import shotlab.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
