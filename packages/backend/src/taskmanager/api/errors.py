"""Exception handlers — the one place domain errors become HTTP.

ValidationError and malformed requests → 400
AuthFailure                            → 400 (login; the auth gate 401s itself)
NotFoundError                          → 404
SQLAlchemyError                        → 500, logged, no detail returned

Request-schema failures come back as 400 rather than FastAPI's 422 so
every kind of invalid input looks the same to clients.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskmanager.errors import AuthFailure, NotFoundError, ValidationError

logger = structlog.get_logger()


def _format_location(loc) -> str:
    return ".".join(str(part) for part in loc)


async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": exc.errors},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{_format_location(err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": errors},
    )


async def auth_failure_handler(request: Request, exc: AuthFailure):
    return JSONResponse(status_code=400, content={"detail": "Unable to login"})


async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": "Not found"})


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("store.error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AuthFailure, auth_failure_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
