#!/usr/bin/env python3
"""
Main CLI entry point for the Campus backend server.
"""

import asyncio
import sys

import click
import uvicorn

from campus import __version__
from campus.config import settings
from campus.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="campus")
def cli() -> None:
    """Campus CLI - run the GraphQL server and manage the database."""
    pass


@cli.command()
@click.option("--host", default=settings.api_host, help="Host to bind to")
@click.option("--port", default=settings.api_port, type=int, help="Port to bind to")
@click.option(
    "--in-memory",
    is_flag=True,
    default=False,
    help="Serve from an in-memory store instead of the database",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, in_memory: bool, log_level: str) -> None:
    """Start the Campus API server."""
    configure_logging(debug=(log_level == "debug"))

    logger.info(
        "Starting Campus API server",
        host=host,
        port=port,
        in_memory=in_memory,
        log_level=log_level,
    )

    from campus.api.app import create_app

    gateway = None
    if in_memory:
        from campus.gateway.memory import create_memory_gateway

        gateway = create_memory_gateway()

    try:
        uvicorn.run(
            create_app(gateway),
            host=host,
            port=port,
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("init-db")
def init_db() -> None:
    """Create the campus tables in the configured database."""
    from campus.database.connection import create_engine
    from campus.dbmodels import Base

    configure_logging()

    async def do_init():
        engine = create_engine()
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")
            click.echo("✓ Database tables created")
        except Exception as e:
            logger.error("Failed to create tables", error=str(e))
            click.echo(f"✗ Error creating tables: {e}", err=True)
            sys.exit(1)
        finally:
            await engine.dispose()

    asyncio.run(do_init())


if __name__ == "__main__":
    cli()
