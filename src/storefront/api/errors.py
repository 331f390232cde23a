"""Translate domain failures into HTTP responses.

Every error body is ``{"reason": <category>, "message": <text>}``. Internal
details (SQL, stack traces) are logged, never returned.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from storefront.shared.errors import StorefrontError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error(status_code: int, reason: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"reason": reason, "message": message})


def flatten_messages(messages) -> str:
    if not isinstance(messages, dict):
        return str(messages)

    parts = []
    for field, errors in messages.items():
        errors = errors if isinstance(errors, list | tuple) else [errors]
        for error in errors:
            parts.append(str(error) if field == "_entity" else f"{field}: {error}")
    return "; ".join(parts) or "Invalid request"


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, reason=exc.reason, cause=repr(exc.__cause__))
    return _error(exc.status_code, exc.reason, exc.message)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, "ValidationError", flatten_messages(exc.messages))


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return _error(400, "ValidationError", "; ".join(parts) or "Invalid request")


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error(404, "NotFound", "The requested resource was not found")


async def invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _error(409, "InvalidOperation", str(exc) or "Operation not allowed")


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path)
    return _error(500, "InternalError", "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(InvalidOperationError, invalid_operation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
