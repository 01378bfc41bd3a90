"""Object storage for uploaded attachments.

- StorageProvider: abstract base class for storage implementations
- LocalStorageProvider: filesystem storage for development
- S3StorageProvider: S3-compatible storage (AWS, MinIO)
"""

from .base import (
    ObjectNotFound,
    SecurityException,
    StorageConfig,
    StorageException,
    StorageProvider,
    validate_storage_key,
)
from .config import create_example_config, load_storage_config
from .factory import create_storage_provider, get_storage_config, get_storage_provider

__all__ = [
    "StorageProvider",
    "StorageConfig",
    "StorageException",
    "SecurityException",
    "ObjectNotFound",
    "validate_storage_key",
    "create_storage_provider",
    "get_storage_config",
    "get_storage_provider",
    "load_storage_config",
    "create_example_config",
]
