"""Development adapter: every request is the same local user."""

from __future__ import annotations

import os
from uuid import UUID

from ...logging import get_logger
from .base import AuthenticationError, Principal

logger = get_logger(__name__)

DEFAULT_DEV_USER_ID = "00000000-0000-7000-8000-000000000001"

_PRODUCTION_ENVIRONMENTS = ("production", "prod")


class NoAuthAdapter:
    """
    Accept any non-empty bearer token as ``default_user_id``.

    The user still has to exist in the ``users`` table; resolvers look its role
    up like any other caller's. Construction fails when ``TALAWA_ENVIRONMENT``
    names a production environment.
    """

    def __init__(self, default_user_id: str = DEFAULT_DEV_USER_ID):
        environment = os.getenv("TALAWA_ENVIRONMENT", "").lower()
        if environment in _PRODUCTION_ENVIRONMENTS:
            logger.error("Refusing to enable no-auth mode", environment=environment)
            raise RuntimeError(
                "NoAuthAdapter cannot be used in production environments. "
                "Set TALAWA_AUTH_PROVIDER=jwt."
            )

        self.default_user_id = default_user_id
        logger.warning(
            "No-auth mode: all requests act as the development user", user_id=default_user_id
        )

    async def verify_token(self, token: str) -> Principal:
        if not token:
            raise AuthenticationError("Token required (even in no-auth mode)")

        return Principal(
            provider="none",
            subject=self.default_user_id,
            email="dev@example.com",
            display_name="Development User",
            claims={"mode": "development"},
        )

    async def issue_token(self, user_id: UUID | None = None, claims: dict | None = None) -> str:
        """Return a readable placeholder; its content is never checked."""
        parts = ["dev-token", str(user_id) if user_id else self.default_user_id, "no-auth-mode"]
        parts.extend(f"{key}={value}" for key, value in (claims or {}).items())
        return "|".join(parts)
