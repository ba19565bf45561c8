"""Litestar application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from advanced_alchemy.config.asyncio import AsyncSessionConfig
from advanced_alchemy.extensions.litestar import SQLAlchemyAsyncConfig, SQLAlchemyPlugin
from litestar import Litestar
from litestar.exceptions import HTTPException
from litestar.openapi import OpenAPIConfig
from litestar.status_codes import HTTP_404_NOT_FOUND
from sqlalchemy.ext.asyncio import AsyncEngine

from moodmeter_server import __version__
from moodmeter_server.api import api_routers
from moodmeter_server.core.config import Settings, settings
from moodmeter_server.core.database import close_database, create_engine, init_database
from moodmeter_server.core.exceptions import (
    http_exception_handler,
    log_exception,
    not_found_handler,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def create_app(app_settings: Settings | None = None, engine: AsyncEngine | None = None) -> Litestar:
    """Create Litestar application.

    The database engine is created here (or passed in) and owned by the
    application: it is checked before serving and disposed on shutdown.

    Args:
        app_settings: Settings to use (defaults to the environment settings)
        engine: Pre-built engine, e.g. a test database

    Returns:
        Configured Litestar app instance
    """
    app_settings = app_settings or settings
    engine = engine or create_engine(app_settings)

    logging.basicConfig(format="%(message)s", level=app_settings.log_level)

    @asynccontextmanager
    async def lifespan(app: Litestar) -> AsyncIterator[None]:
        """Application lifespan manager.

        Verifies (or creates) the schema on startup and closes the
        connection pool on shutdown.
        """
        logger.info(
            "Starting moodmeter-server",
            version=__version__,
            coalesce_window_ms=app_settings.coalesce_window_ms,
        )

        await init_database(engine, create_schema=app_settings.create_schema)
        logger.info("Database initialized")

        yield

        await close_database(engine)
        logger.info("Shutdown complete")

    return Litestar(
        route_handlers=api_routers,
        lifespan=[lifespan],
        openapi_config=OpenAPIConfig(
            title="moodmeter-server API",
            version=__version__,
            description="Personal mood tracking with public histories and metrics",
        ),
        plugins=[
            SQLAlchemyPlugin(
                config=SQLAlchemyAsyncConfig(
                    engine_instance=engine,
                    session_dependency_key="session",
                    session_config=AsyncSessionConfig(expire_on_commit=False),
                ),
            ),
        ],
        exception_handlers={
            HTTP_404_NOT_FOUND: not_found_handler,
            HTTPException: http_exception_handler,
        },
        after_exception=[log_exception],
        debug=app_settings.log_level == "DEBUG",
    )
