"""
Per-request logging context
"""

import json
import re
import time
from collections.abc import Callable, Mapping
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import clear_request_context, get_logger, get_request_id, set_request_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "auth",
    "key",
    "jwt",
    "session",
    "cookie",
    "credentials",
}

# A GraphQL document or its variables sent as query parameters is never logged
_GRAPHQL_PAYLOAD_PARAMS = ("query", "variables", "extensions")

_OPERATION_PATTERN = re.compile(r"^\s*(query|mutation|subscription)\s+(\w+)")
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def sanitize_query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Redact query parameters whose names look like credentials."""
    return {
        key: "[REDACTED]" if any(word in key.lower() for word in SENSITIVE_KEYS) else value
        for key, value in params.items()
    }


def operation_name_from_document(query: Any) -> str | None:
    """Name a GraphQL document for logs: ``Post``, ``mutation:CreatePost``, ..."""
    if not isinstance(query, str) or not query:
        return None
    if "__schema" in query or "IntrospectionQuery" in query:
        return "__introspection"

    match = _OPERATION_PATTERN.search(query)
    if match is None:
        return "unnamed_operation"
    kind, name = match.groups()
    return name if kind == "query" else f"{kind}:{name}"


def _operation_from_payload(payload: Mapping[str, Any]) -> str | None:
    name = payload.get("operationName")
    if isinstance(name, str) and name:
        return name
    return operation_name_from_document(payload.get("query"))


async def extract_graphql_operation_name(request: Request) -> str | None:
    """Best-effort operation name for a request to ``/graphql``."""
    if request.url.path != "/graphql":
        return None

    if request.method == "GET":
        return _operation_from_payload(request.query_params)

    # Multipart bodies carry file uploads and are left for the GraphQL router to parse
    content_type = request.headers.get("content-type", "")
    if request.method != "POST" or not content_type.startswith("application/json"):
        return None

    try:
        payload = json.loads(await request.body() or b"null")
    except ValueError:
        return None
    return _operation_from_payload(payload) if isinstance(payload, dict) else None


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """
    Give every request a request id and log its start and completion.

    A well-formed incoming ``X-Request-ID`` is reused so ids can be correlated
    with an upstream proxy; the id is echoed on the response. The user id is
    bound later, once a resolver has verified the caller's token.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming_id = request.headers.get(REQUEST_ID_HEADER)
        if incoming_id and not _REQUEST_ID_PATTERN.match(incoming_id):
            incoming_id = None
        set_request_context(request_id=incoming_id)

        started = time.perf_counter()
        try:
            query_params = None
            if request.query_params:
                query_params = sanitize_query_params(request.query_params)
                if request.url.path == "/graphql":
                    for name in _GRAPHQL_PAYLOAD_PARAMS:
                        if name in query_params:
                            query_params[name] = "[REDACTED]"

            operation = await extract_graphql_operation_name(request)

            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                query_params=query_params,
                graphql_operation=operation,
                user_agent=request.headers.get("user-agent"),
                remote_addr=request.client.host if request.client else None,
            )

            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = get_request_id() or ""

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                graphql_operation=operation,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response

        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        finally:
            clear_request_context()
