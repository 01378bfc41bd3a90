"""Factory for creating the configured storage provider."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from ..logging import get_logger
from .base import StorageConfig, StorageProvider
from .config import DEFAULT_LOCAL_BASE_PATH, load_storage_config
from .implementations.local import LocalStorageProvider
from .implementations.s3 import S3StorageProvider

logger = get_logger(__name__)

# Loaded once to avoid re-parsing YAML on every request
_storage_config: StorageConfig | None = None


def get_storage_config() -> StorageConfig:
    """Get the singleton storage configuration.

    Loads the configuration from settings.storage_config_path on first access.
    """
    global _storage_config

    if _storage_config is None:
        from ..config import settings

        config_path = Path(settings.storage_config_path) if settings.storage_config_path else None
        _storage_config = load_storage_config(config_path)
        logger.info(
            "Loaded storage configuration",
            default_provider=_storage_config.default_provider,
            providers=list(_storage_config.providers.keys()),
        )

    return _storage_config


def create_storage_provider(provider_type: str, config: dict[str, Any]) -> StorageProvider:
    """Create a storage provider instance from configuration.

    Raises:
        ValueError: If provider type is unknown or configuration is invalid
        ImportError: If required dependencies are not available
    """
    if provider_type == "local":
        return LocalStorageProvider(base_path=Path(config.get("base_path", DEFAULT_LOCAL_BASE_PATH)))

    elif provider_type == "s3":
        bucket = config.get("bucket")
        if not bucket:
            raise ValueError("S3 storage requires 'bucket' in configuration")

        return S3StorageProvider(
            bucket=bucket,
            region=config.get("region", "us-east-1"),
            aws_access_key_id=config.get("aws_access_key_id"),
            aws_secret_access_key=config.get("aws_secret_access_key"),
            endpoint_url=config.get("endpoint_url"),
            upload_config=config.get("upload_config", {}),
        )

    raise ValueError(f"Unknown storage provider type: {provider_type}")


@lru_cache(maxsize=1)
def get_storage_provider() -> StorageProvider:
    """Return the process-wide provider named by `default_provider`."""
    storage_config = get_storage_config()
    name = storage_config.default_provider

    provider_config = storage_config.providers.get(name)
    if provider_config is None:
        raise ValueError(f"Storage provider not configured: {name}")

    provider_type = provider_config.get("type", name)
    provider = create_storage_provider(provider_type, provider_config.get("config", {}))
    logger.info("Using storage provider", provider=name, type=provider_type)
    return provider
