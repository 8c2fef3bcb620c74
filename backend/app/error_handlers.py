"""
JSON error responses.

Every error leaves the API as ``{"detail": ..., "status_code": ...}``, with two
exceptions: validation failures add an ``errors`` list of human-readable
messages, and ledger operations (OperationFailedError) answer with
``{"success": false, "message": ...}``. Unhandled exceptions are logged in
full and reported to the client as a bare 500. The request ID reaches the
logs through the structlog context and is never put in a body.
"""

from collections.abc import Iterable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logging import get_logger

from .exceptions import DomainError, OperationFailedError

logger = get_logger("campuseats.errors")

VALUE_ERROR_PREFIX = "Value error, "


def error_body(detail: str, status_code: int) -> dict:
    return {"detail": detail, "status_code": status_code}


def validation_messages(errors: Iterable[dict]) -> list[str]:
    """Validator messages without pydantic's prefix, first occurrence order, no repeats."""
    seen: dict[str, None] = {}
    for error in errors:
        message = str(error.get("msg", "")).removeprefix(VALUE_ERROR_PREFIX)
        if message:
            seen.setdefault(message)
    return list(seen)


def _validation_failed(request: Request, errors: Iterable[dict]) -> JSONResponse:
    messages = validation_messages(errors)
    logger.info("validation_failed", path=request.url.path, errors=messages)
    code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(
        status_code=code,
        content={**error_body("Validation failed.", code), "errors": messages},
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("http_error", path=request.url.path, status_code=exc.status_code)
    else:
        logger.info("http_error", path=request.url.path, status_code=exc.status_code, detail=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _validation_failed(request, exc.errors())


async def handle_model_validation(request: Request, exc: ValidationError) -> JSONResponse:
    return _validation_failed(request, exc.errors())


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    logger.info(
        "domain_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        detail=exc.message,
    )
    if isinstance(exc, OperationFailedError):
        content = {"success": False, "message": exc.message}
    else:
        content = error_body(exc.message, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=content)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error_type=type(exc).__name__)
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content=error_body("Internal server error", code))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(ValidationError, handle_model_validation)
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(Exception, handle_unexpected)
