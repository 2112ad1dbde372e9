"""
Structured logging configuration with JSON formatting and correlation IDs.
"""

import logging
import sys
import uuid
from typing import Optional
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context variable for correlation ID (per request task)
correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to log records."""

    def filter(self, record):
        record.correlation_id = correlation_id_var.get() or "none"
        return True


class LitariaJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and source location.

    Anything passed through ``extra=`` (event_type, user_id, post_id, ...)
    is emitted as a top-level field by the base formatter.
    """

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = (
            datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        )
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record.setdefault("correlation_id", getattr(record, "correlation_id", "none"))
        log_record["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }


def setup_logging(level: int = logging.INFO):
    """Configure structured JSON logging for the application and uvicorn."""
    formatter = LitariaJsonFormatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "apscheduler"):
        named = logging.getLogger(name)
        named.handlers.clear()
        named.addHandler(console_handler)
        named.propagate = False

    security_logger = logging.getLogger("security.audit")
    security_logger.setLevel(logging.INFO)

    return security_logger


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation IDs to requests."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = correlation_id
        return response


def log_security_event(
    event_type: str,
    message: str,
    level: int = logging.INFO,
    user_id: Optional[str] = None,
    username: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    request_method: Optional[str] = None,
    request_path: Optional[str] = None,
    event_category: str = "security",
    **extra_fields
):
    """
    Log a security event with structured data.

    Args:
        event_type: Type of security event (e.g., "auth.login.success")
        message: Human-readable message
        level: Logging level (default: INFO)
        user_id: User ID if applicable
        username: Username (email) if applicable
        ip_address: Client IP address
        user_agent: Client user agent
        request_method: HTTP method
        request_path: Request path
        event_category: Event category (default: "security")
        **extra_fields: Additional fields to include
    """
    logger = logging.getLogger("security.audit")

    extra = {
        "event_type": event_type,
        "event_category": event_category,
    }

    if user_id:
        extra["user_id"] = user_id
    if username:
        extra["username"] = username
    if ip_address:
        extra["ip_address"] = ip_address
    if user_agent:
        extra["user_agent"] = user_agent
    if request_method:
        extra["request_method"] = request_method
    if request_path:
        extra["request_path"] = request_path

    extra.update(extra_fields)

    logger.log(level, message, extra=extra)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request, considering proxies."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"
