"""
Application error taxonomy and the FastAPI handlers that turn errors into
structured JSON bodies: ``{error, message, statusCode, timestamp, path}``.
"""

import logging
import re
from enum import Enum
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.timeutils import utcnow

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    NOT_FOUND_ERROR = "NOT_FOUND_ERROR"
    CONFLICT_ERROR = "CONFLICT_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class APIError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = 500
    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(APIError):
    status_code = 400
    error_type = ErrorType.VALIDATION_ERROR
    default_message = "Validation failed"


class AuthenticationError(APIError):
    status_code = 401
    error_type = ErrorType.AUTHENTICATION_ERROR
    default_message = "Authentication required"


class AuthorizationError(APIError):
    status_code = 403
    error_type = ErrorType.AUTHORIZATION_ERROR
    default_message = "Insufficient permissions"


class NotFoundError(APIError):
    status_code = 404
    error_type = ErrorType.NOT_FOUND_ERROR
    default_message = "Resource not found"


class ConflictError(APIError):
    status_code = 409
    error_type = ErrorType.CONFLICT_ERROR
    default_message = "Resource conflict"


class DatabaseError(APIError):
    status_code = 500
    error_type = ErrorType.DATABASE_ERROR
    default_message = "Database operation failed"


_STATUS_TO_TYPE = {
    400: ErrorType.VALIDATION_ERROR,
    401: ErrorType.AUTHENTICATION_ERROR,
    403: ErrorType.AUTHORIZATION_ERROR,
    404: ErrorType.NOT_FOUND_ERROR,
    405: ErrorType.VALIDATION_ERROR,
    409: ErrorType.CONFLICT_ERROR,
    422: ErrorType.VALIDATION_ERROR,
}

SENSITIVE_PATTERNS = [
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"key", re.IGNORECASE),
    re.compile(r"connection string", re.IGNORECASE),
    re.compile(r"database url", re.IGNORECASE),
]

GENERIC_SERVER_ERROR = "An internal server error occurred. Please try again later."


def sanitize_error_message(message: str, status_code: int) -> str:
    """Hide server error detail in production and redact sensitive words.

    Client errors (4xx) carry messages written by the application and are
    returned unchanged.
    """
    if status_code < 500:
        return message
    if settings.is_production:
        return GENERIC_SERVER_ERROR

    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub("[REDACTED]", sanitized)
    return sanitized


def error_response(
    request: Request, status_code: int, error_type: ErrorType, message: str
) -> JSONResponse:
    body = {
        "error": error_type.value,
        "message": sanitize_error_message(message, status_code),
        "statusCode": status_code,
        "timestamp": utcnow().isoformat() + "Z",
        "path": request.url.path,
    }
    return JSONResponse(status_code=status_code, content=body)


def _log(request: Request, status_code: int, error_type: ErrorType, exc: Exception):
    extra = {
        "error_type": error_type.value,
        "status_code": status_code,
        "request_method": request.method,
        "request_path": request.url.path,
    }
    if status_code >= 500:
        logger.error(f"API error: {error_type.value}", exc_info=exc, extra=extra)
    else:
        logger.warning(f"API error: {error_type.value}: {exc}", extra=extra)


async def api_error_handler(request: Request, exc: APIError):
    _log(request, exc.status_code, exc.error_type, exc)
    return error_response(request, exc.status_code, exc.error_type, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    message = "Invalid request data: " + ", ".join(details)
    _log(request, 400, ErrorType.VALIDATION_ERROR, exc)
    return error_response(request, 400, ErrorType.VALIDATION_ERROR, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_type = _STATUS_TO_TYPE.get(exc.status_code, ErrorType.INTERNAL_ERROR)
    _log(request, exc.status_code, error_type, exc)
    response = error_response(request, exc.status_code, error_type, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def integrity_error_handler(request: Request, exc: IntegrityError):
    _log(request, 409, ErrorType.CONFLICT_ERROR, exc)
    return error_response(
        request,
        409,
        ErrorType.CONFLICT_ERROR,
        "A record with this information already exists",
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    _log(request, 500, ErrorType.DATABASE_ERROR, exc)
    return error_response(
        request, 500, ErrorType.DATABASE_ERROR, "Database operation failed"
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    _log(request, 500, ErrorType.INTERNAL_ERROR, exc)
    message = str(exc) if settings.DEBUG else "Internal server error"
    return error_response(request, 500, ErrorType.INTERNAL_ERROR, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
