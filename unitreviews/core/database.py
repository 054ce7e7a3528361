"""
Database configuration and session management
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from unitreviews.config import settings
from unitreviews.core.errors import TransactionAbortError
from unitreviews.core.logging import get_logger

logger = get_logger(__name__)


def _engine_options(url: str) -> dict[str, Any]:
    """Pool options for the configured backend (SQLite has no sized pool)."""
    if url.startswith("sqlite"):
        return {"echo": settings.DB_ECHO}
    return {
        "echo": settings.DB_ECHO,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 3600,
    }


# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Usage in FastAPI:
        @router.get("/units")
        async def list_units(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Units))
            return result.scalars().all()
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_async_session() -> AsyncSession:
    """
    Get a standalone async database session for background jobs.

    This is a context manager that should be used with 'async with':
        async with get_async_session() as db:
            await refresh_most_reviews_tag(db)

    Note: Caller is responsible for committing/rolling back.
    """
    return AsyncSessionLocal()


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Transaction scope for multi-row writes.

    Everything written through ``db`` inside the block is committed together
    when the block exits normally. Any exception rolls the whole block back
    and is re-raised; a failing commit is rolled back and raised as
    TransactionAbortError.

    Usage:
        async with unit_of_work(db):
            db.add(review)
            await recompute_unit_aggregates(db, review.unit_id)
    """
    try:
        yield db
    except Exception:
        await db.rollback()
        raise

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("transaction_commit_failed", error=str(e), error_type=type(e).__name__)
        raise TransactionAbortError("The operation could not be completed and was rolled back") from e


async def create_db_and_tables() -> None:
    """Create all tables from SQLModel metadata (no-op for existing tables)."""
    # Models must be imported so their tables register on the metadata
    import unitreviews.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
