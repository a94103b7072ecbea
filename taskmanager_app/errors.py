"""Application error taxonomy and the FastAPI handlers that render it.

Every error reaching a client is a JSON body of the form ``{"message": ...}``
with a short, generic string. Internal details (SQL errors, tracebacks) are
logged server-side only.
"""

from __future__ import annotations

import enum
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500
    default_message = SERVER_ERROR_MESSAGE

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    """A required field is missing or a value is malformed."""

    status_code = 400
    default_message = "Invalid request"


class AuthErrorKind(str, enum.Enum):
    MISSING = "missing"
    INVALID = "invalid"
    EXPIRED = "expired"
    INVALID_CREDENTIALS = "invalid_credentials"


_AUTH_MESSAGES = {
    AuthErrorKind.MISSING: "No token, authorization denied",
    AuthErrorKind.INVALID: "Token is not valid",
    AuthErrorKind.EXPIRED: "Token has expired",
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid credentials",
}


class AuthError(AppError):
    """Missing/invalid/expired bearer token or a failed login."""

    status_code = 401

    def __init__(self, kind: AuthErrorKind) -> None:
        self.kind = kind
        super().__init__(_AUTH_MESSAGES[kind])


class ConflictError(AppError):
    """The email address is already registered."""

    status_code = 409
    default_message = "User already exists"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


def _json(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, AuthError):
        logger.info("Auth failure (%s) on %s %s", exc.kind.value, request.method, request.url.path)
        return _json(exc.status_code, exc.message, headers={"WWW-Authenticate": "Bearer"})
    return _json(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        loc = [p for p in first.get("loc", ()) if isinstance(p, str) and p not in ("body", "query", "path")]
        msg = first.get("msg") or message
        # pydantic prefixes custom validator messages with "Value error, "
        msg = msg.removeprefix("Value error, ")
        message = f"{'.'.join(loc)}: {msg}" if loc else msg
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return _json(400, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _json(404, "Route not found")
    return _json(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _json(500, SERVER_ERROR_MESSAGE)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _json(500, SERVER_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
