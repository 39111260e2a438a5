"""
Registrar application.

FastAPI application with structured logging, error handling,
and registration latency metrics.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from registrar import __version__
from registrar.api import health_router, metrics_router, users_router
from registrar.config import get_settings
from registrar.core import get_logger, metrics, setup_logging
from registrar.core.middleware import (
    RequestContextMiddleware,
    RequestSizeLimitMiddleware,
    setup_exception_handlers,
)
from registrar.db import dispose_engine, verify_database_connection
from registrar.services import build_registration_service

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        json_output=not settings.debug,
        log_file=settings.log_file or None,
    )
    params = settings.cost_parameters
    logger.info(
        "Starting registrar",
        data={
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
            "argon2": {
                "m": params.memory_kib,
                "t": params.iterations,
                "p": params.parallelism,
            },
        },
    )

    # Verify database connectivity (does NOT run migrations)
    if verify_database_connection():
        logger.info("Database connection verified")
    else:
        logger.warning(
            "Database connection failed - run 'alembic upgrade head' to initialize"
        )

    # Tests may inject their own registry or service before startup.
    if not hasattr(_app.state, "metrics_registry"):
        _app.state.metrics_registry = metrics
    if not hasattr(_app.state, "registration_service"):
        _app.state.registration_service = build_registration_service(
            settings, _app.state.metrics_registry
        )

    yield

    logger.info("Shutting down registrar")
    dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Registrar",
        description="User registration with Argon2id password hashing",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Setup exception handlers (must be before middleware)
    setup_exception_handlers(app)

    # Middleware order matters - last added = first executed
    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=settings.max_request_bytes,
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(metrics_router)

    return app
