"""Global error handlers — engine failures and everything else as JSON."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lms.errors import EngineError

logger = structlog.get_logger()

STATUS_BY_KIND: dict[str, int] = {
    "not_found": 404,
    "conflict": 409,
    "invalid_state": 422,
    "access_denied": 403,
    "ambiguous_scope": 400,
    "rate_limited": 429,
    "not_enrolled": 409,
}


def status_for(exc: EngineError) -> int:
    return STATUS_BY_KIND.get(exc.kind, 400)


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
        """Render a typed engine failure with its kind and extras."""
        status_code = status_for(exc)
        logger.info("engine_error", kind=exc.kind, status_code=status_code, path=request.url.path)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.detail, "kind": exc.kind, **exc.extras()},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw ``ctx`` objects pydantic may attach."""
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]
