"""FastAPI application factory.

create_app() returns a configured FastAPI instance: lifespan, middleware,
exception handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskmanager import __version__
from taskmanager.api import api_router
from taskmanager.api.errors import register_exception_handlers
from taskmanager.config import settings
from taskmanager.db.engine import engine
from taskmanager.db.models import Base

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    In development the schema is created on startup so a fresh database
    works without running Alembic. Other environments migrate explicitly.
    """
    logger.info(
        "taskmanager.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if settings.environment == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("taskmanager.schema_ready")

    yield

    logger.info("taskmanager.shutdown")
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Task Manager",
        description="Personal task tracking with per-user bearer-token sessions",
        version=__version__,
        lifespan=lifespan,
    )

    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler
    from taskmanager.middleware.request_id import RequestIdMiddleware
    from taskmanager.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: taskmanager.main:app)
app = create_app()
