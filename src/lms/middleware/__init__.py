"""Middleware registration."""

from fastapi import FastAPI

from lms.config import Settings
from lms.middleware.cors import setup_cors
from lms.middleware.error_handler import setup_error_handlers
from lms.middleware.logging import setup_logging
from lms.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order, so CORS is added last to
    wrap every error response.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
