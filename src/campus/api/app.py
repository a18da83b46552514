"""
Main FastAPI application for the Campus backend
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..database.connection import check_database_connection, create_engine, create_session_factory
from ..dispatch import Dispatcher
from ..gateway.base import PersistenceGateway
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Campus API...", environment=settings.environment)

    engine = None
    if getattr(app.state, "dispatcher", None) is None:
        from ..gateway.sql import create_sql_gateway

        engine = create_engine()
        ok, error = await check_database_connection(engine)
        if not ok:
            logger.error("Database connection check failed", error=error)

        app.state.dispatcher = Dispatcher(
            create_sql_gateway(create_session_factory(engine)),
            batch_relations=settings.batch_relations,
        )
        logger.info("Database gateway initialized")

    yield

    logger.info("Shutting down Campus API...")
    if engine is not None:
        await engine.dispose()
        app.state.dispatcher = None


def create_app(gateway: PersistenceGateway | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        gateway: Gateway to serve from. When omitted the app connects to the
            configured database on startup.
    """
    configure_logging(debug=settings.debug, log_level=settings.log_level)

    app = FastAPI(
        title="Campus API",
        description="GraphQL interface over students, departments, teachers and courses",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.dispatcher = (
        Dispatcher(gateway, batch_relations=settings.batch_relations)
        if gateway is not None
        else None
    )

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint
    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    try:
        from ..graphql.schema import create_graphql_router, validate_schema

        # Fail fast on an invalid schema or a missing relation resolver
        logger.info("Validating GraphQL schema...")
        validate_schema()

        app.include_router(create_graphql_router(), prefix="")
        logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")
    except Exception as e:  # pragma: no cover
        logger.error("Failed to initialize GraphQL endpoint", error=str(e))
        raise

    return app
