"""HS256 tokens issued and verified by the API itself."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import jwt
from jwt.exceptions import InvalidTokenError

from ...logging import get_logger
from .base import AuthenticationError, Principal

logger = get_logger(__name__)


class JWTAuthAdapter:
    """
    Verify self-issued JWTs.

    The ``sub`` claim holds the user id. Issuer and audience are pinned so tokens
    minted for another service with the same secret are rejected.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "talawa-api",
        audience: str = "talawa-clients",
        token_expiry_hours: int = 24,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.token_expiry = timedelta(hours=token_expiry_hours)

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={"require": ["exp", "iat"]},
            )
        except InvalidTokenError as e:
            logger.warning("JWT token validation failed", error=str(e))
            raise AuthenticationError("Invalid token") from e

    async def verify_token(self, token: str) -> Principal:
        payload = self._decode(token)

        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Missing 'sub' claim in token")

        principal = Principal(provider="jwt", subject=str(subject), claims=payload)
        if email := payload.get("email"):
            principal["email"] = email
        if name := payload.get("name"):
            principal["display_name"] = name
        return principal

    async def issue_token(self, user_id: UUID | None = None, claims: dict | None = None) -> str:
        """Sign a token for ``user_id`` valid for ``token_expiry_hours``."""
        issued_at = datetime.now(UTC)
        payload: dict[str, Any] = {
            "iss": self.issuer,
            "aud": self.audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": issued_at + self.token_expiry,
            **(claims or {}),
        }
        if user_id:
            payload["sub"] = str(user_id)

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
