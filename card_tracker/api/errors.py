"""Error normalization - every failure leaves as {success: false, error: message}"""

import logging
import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from card_tracker.domain.exceptions import (
    AlreadyExists,
    DomainException,
    NotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class InternalError(DomainException):
    """Anything not recognized as a client error"""

    status_code = 500
    default_message = "Internal server error"


def integrity_kind(exc: IntegrityError) -> str:
    """Classify an IntegrityError as "unique", "foreign_key" or "other"."""
    orig = exc.orig
    pgcode = getattr(orig, "pgcode", None)
    if pgcode == UNIQUE_VIOLATION:
        return "unique"
    if pgcode == FOREIGN_KEY_VIOLATION:
        return "foreign_key"

    text = str(orig).lower()
    if "unique" in text:
        return "unique"
    if "foreign key" in text:
        return "foreign_key"
    return "other"


def normalize_exception(exc: Exception) -> DomainException:
    """Map any exception raised while handling a request to a domain error"""
    if isinstance(exc, DomainException):
        return exc
    if isinstance(exc, IntegrityError):
        kind = integrity_kind(exc)
        if kind == "unique":
            return AlreadyExists()
        if kind == "foreign_key":
            return ValidationError("Foreign key constraint failed")
    if isinstance(exc, NoResultFound):
        return NotFound()
    return InternalError()


def validation_message(exc: RequestValidationError) -> str:
    """One human-readable line for a request body/query validation failure"""
    errors = exc.errors()
    missing = [str(err["loc"][-1]) for err in errors if err.get("type") == "missing" and err.get("loc")]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location) or "request"
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}"


def error_response(status_code: int, message: str, exc: BaseException | None = None, include_stack: bool = False) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": message}
    if include_stack and exc is not None:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI, include_stack: bool) -> None:
    """Install handlers; stack traces are only attached when include_stack is set"""

    def _respond(request: Request, exc: Exception) -> JSONResponse:
        error = normalize_exception(exc)
        if error.status_code >= 500:
            logger.error(
                f"Unhandled error: {exc}",
                exc_info=exc,
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "path": request.url.path,
                    "method": request.method,
                },
            )
        return error_response(error.status_code, error.message, exc, include_stack and error.status_code >= 500)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        return _respond(request, exc)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        return _respond(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(400, validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        response = error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        return _respond(request, exc)
