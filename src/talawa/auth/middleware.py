"""Resolve the caller's authentication context from request headers."""

from __future__ import annotations

from uuid import UUID

from ..logging import bind_user_id, get_logger
from .adapters.base import AuthenticationError
from .context import ANONYMOUS, AuthContext
from .factory import get_auth_adapter_cached

logger = get_logger(__name__)


async def get_auth_context_optional(authorization: str | None = None) -> AuthContext:
    """
    Extract the authentication context from an Authorization header.

    Never raises: a missing, malformed or rejected token yields an
    unauthenticated context, and the caller decides whether that is an error.
    In no-auth mode a request without a token is treated as the development user.
    """
    adapter = get_auth_adapter_cached()
    is_no_auth_mode = hasattr(adapter, "default_user_id")

    if not authorization:
        if not is_no_auth_mode:
            return ANONYMOUS
        authorization = "Bearer dev-token"

    if not authorization.startswith("Bearer "):
        logger.warning("Invalid authorization format received")
        return ANONYMOUS

    token = authorization[7:]
    if not token:
        logger.warning("Empty token provided")
        return ANONYMOUS

    try:
        principal = await adapter.verify_token(token)
    except AuthenticationError as e:
        logger.info("Authentication failed", error=str(e))
        return ANONYMOUS

    try:
        user_id = UUID(principal["subject"])
    except ValueError:
        logger.warning(
            "Token subject is not a user id",
            provider=principal.get("provider"),
        )
        return ANONYMOUS

    bind_user_id(str(user_id))
    return AuthContext(user_id=user_id, principal=principal, token=token)
