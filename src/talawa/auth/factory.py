"""Factory for creating auth adapters based on configuration."""

from __future__ import annotations

from functools import lru_cache

from ..config import settings
from .adapters.base import AuthAdapter
from .adapters.jwt import JWTAuthAdapter
from .adapters.none import DEFAULT_DEV_USER_ID, NoAuthAdapter


def get_auth_adapter() -> AuthAdapter:
    """Create and return the configured auth adapter."""
    provider = settings.auth_provider
    config = settings.auth_config or {}

    if provider == "none":
        return NoAuthAdapter(
            default_user_id=config.get("default_user_id", DEFAULT_DEV_USER_ID),
        )

    elif provider == "jwt":
        secret_key = config.get("secret_key") or settings.jwt_secret
        if not secret_key:
            raise ValueError(
                "JWT secret key is required. Set TALAWA_JWT_SECRET or provide in config."
            )

        return JWTAuthAdapter(
            secret_key=secret_key,
            algorithm=config.get("algorithm", settings.jwt_algorithm),
            issuer=config.get("issuer", "talawa-api"),
            audience=config.get("audience", "talawa-clients"),
        )

    raise ValueError(f"Unknown auth provider: {provider}")


@lru_cache(maxsize=1)
def get_auth_adapter_cached() -> AuthAdapter:
    """Get the process-wide auth adapter instance."""
    return get_auth_adapter()
