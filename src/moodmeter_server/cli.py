"""CLI entry point for moodmeter-server."""

import asyncio

import typer
import uvicorn

from moodmeter_server import __version__
from moodmeter_server.core.config import Settings, settings
from moodmeter_server.core.database import close_database, create_engine, init_database

app = typer.Typer(
    name="moodmeter-server",
    help="Personal mood tracking API server",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (overrides config)"),
    port: int = typer.Option(None, help="Port to bind to (overrides config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server.

    Example:
        moodmeter-server serve
        moodmeter-server serve --host 0.0.0.0 --port 8080 --reload
    """
    uvicorn.run(
        "moodmeter_server.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


async def _create_schema(db_settings: Settings) -> None:
    engine = create_engine(db_settings)
    try:
        await init_database(engine, create_schema=True)
    finally:
        await close_database(engine)


@app.command("init-db")
def init_db(
    database_url: str = typer.Option(None, help="Database URL (overrides config)"),
) -> None:
    """Create the users and mood_samples tables from the models.

    Meant for development and SQLite; use 'alembic upgrade head' for
    managed databases. Existing tables are left untouched.

    Example:
        moodmeter-server init-db --database-url sqlite+aiosqlite:///mood.db
    """
    db_settings = settings
    if database_url:
        db_settings = settings.model_copy(update={"database_url": database_url})

    asyncio.run(_create_schema(db_settings))
    typer.echo("Schema created")


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"moodmeter-server v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
