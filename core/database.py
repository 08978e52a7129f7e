import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from core.config import settings
from core.exceptions import StorageError

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Single session factory using modern async_sessionmaker (SQLAlchemy 2.0+)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db():
    """Dependency that yields a database session for request scope."""
    async with async_session_factory() as session:
        yield session


async def commit_or_rollback(db: AsyncSession, action: str) -> None:
    """Commit the unit of work, converting persistence failures to StorageError.

    Rollback is required after a failed flush: the transaction is left in a
    failed state and must be reset before the connection returns to the pool.
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Database error while trying to %s: %s", action, e)
        raise StorageError(f"Could not {action}") from e


async def check_db_health() -> bool:
    """Verify database connectivity."""
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
