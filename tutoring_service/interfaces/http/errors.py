"""Every failure leaves the service as ``{"success": false, "error": "..."}``."""
from contextlib import contextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...domain.errors import DomainError, InternalError
from ...infrastructure.metrics import db_errors_total

logger = structlog.get_logger()


def error_body(message: str, **extra) -> dict:
    return {"success": False, "error": message, **extra}


@contextmanager
def persistence_guard(message: str, operation: str):
    """Report any database failure inside the block as an InternalError with ``message``."""
    try:
        yield
    except SQLAlchemyError as exc:
        db_errors_total.labels(operation=operation).inc()
        logger.error("db_failure", operation=operation, error=str(exc))
        raise InternalError(message) from exc


async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=error_body("Invalid request", errors=jsonable_encoder(exc.errors())),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content=error_body(f"Rate limit exceeded: {exc.detail}"))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_error", path=request.url.path, error=repr(exc))
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
