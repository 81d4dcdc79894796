"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from lms.assessment.router import router as assessment_router
from lms.catalog.router import router as catalog_router
from lms.config import get_settings
from lms.database import close_db, init_db
from lms.enrollment.router import router as enrollment_router
from lms.health.router import router as health_router
from lms.middleware import setup_middleware
from lms.options.router import router as options_router
from lms.tools.router import router as tools_router
from lms.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    logger.info("startup", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="LMS Enrollment & Assessment API",
        description="Domain-scoped enrollments, quiz scoring, option integrity and tool switching",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(catalog_router)
    app.include_router(enrollment_router)
    app.include_router(assessment_router)
    app.include_router(options_router)
    app.include_router(tools_router)

    return app


app = create_app()
