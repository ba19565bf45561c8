"""Database engine construction and lifecycle."""

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from moodmeter_server.core.config import Settings
from moodmeter_server.models.base import Base

logger = logging.getLogger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the database engine.

    Pool sizing only applies to server databases; SQLite uses the
    driver's default pool.

    Args:
        settings: Application settings

    Returns:
        Async SQLAlchemy engine
    """
    if settings.is_sqlite():
        return create_async_engine(settings.database_url, echo=False)

    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle,
    )


def _has_migrations(conn: Connection) -> bool:
    return inspect(conn).has_table("alembic_version")


async def init_database(engine: AsyncEngine, create_schema: bool = False) -> None:
    """Prepare the database before serving requests.

    With ``create_schema`` the tables are created directly from the models.
    Otherwise the database is only checked for applied Alembic migrations.

    Args:
        engine: Engine to initialize
        create_schema: Create missing tables from model metadata
    """
    async with engine.begin() as conn:
        if create_schema:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema created from models")
            return

        if not await conn.run_sync(_has_migrations):
            logger.warning(
                "Database migrations have not been applied. "
                "Run 'alembic upgrade head' to initialize the database schema."
            )
            return

        result = await conn.exec_driver_sql("SELECT version_num FROM alembic_version")
        logger.info(f"Database initialized with migration version: {result.scalar()}")


async def close_database(engine: AsyncEngine) -> None:
    """Close the engine's connection pool."""
    await engine.dispose()
