"""
Structured logging for the Talawa API.

Every log line is a structlog event. Events emitted while a request is being
handled carry that request's ``request_id`` and, once the caller's token has been
verified, the ``user_id``; both live in context variables so they follow the
request across awaits without being passed around.
"""

import base64
import logging
import secrets
import sys
import time
from contextvars import ContextVar
from typing import Any

import structlog

SERVICE_NAME = "talawa-api"

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)

# Libraries whose INFO output duplicates our own request logging
_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "aiosqlite", "botocore")


def add_request_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor copying the request context into each event."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_ctx.get()
    if user_id:
        event_dict["user_id"] = user_id

    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Configure stdlib logging and structlog.

    Args:
        debug: Render colored console output instead of JSON lines.
        level: Log level name; defaults to DEBUG when ``debug`` is set, else INFO.
    """
    if level is None:
        log_level = logging.DEBUG if debug else logging.INFO
    else:
        log_level = logging.getLevelName(level.upper())

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer: Any = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_request_context,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Return a 14-character urlsafe id: microsecond timestamp plus 2 random bytes."""
    timestamp_us = int(time.time() * 1_000_000)
    raw = timestamp_us.to_bytes(8, byteorder="big") + secrets.token_bytes(2)
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def set_request_context(request_id: str | None = None, user_id: str | None = None) -> None:
    """Start the logging context of a request, generating a request id if needed."""
    request_id_ctx.set(request_id or generate_request_id())
    if user_id is not None:
        user_id_ctx.set(user_id)


def bind_user_id(user_id: str | None) -> None:
    """Attach the authenticated user to all log lines of the current request."""
    user_id_ctx.set(user_id)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    user_id_ctx.set(None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def get_user_id() -> str | None:
    return user_id_ctx.get()
