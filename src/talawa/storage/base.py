"""Core storage interfaces."""

import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from ..logging import get_logger

logger = get_logger(__name__)

_KEY_COMPONENT = re.compile(r"^[a-zA-Z0-9._-]+$")


@dataclass
class StorageConfig:
    """Configuration for storage system."""

    default_provider: str
    providers: dict[str, dict[str, Any]]


class StorageException(Exception):
    """Base exception for storage operations."""

    pass


class SecurityException(StorageException):
    """Security-related storage exception."""

    pass


class ObjectNotFound(StorageException):
    """Raised when a key does not exist in the store."""

    pass


def validate_storage_key(key: str) -> str:
    """Reject keys that could escape the store's namespace."""
    if not key or ".." in key or key.startswith("/") or "\\" in key:
        raise SecurityException(f"Invalid storage key: {key}")

    for part in key.split("/"):
        if not _KEY_COMPONENT.match(part):
            raise SecurityException(f"Invalid key component: {part}")

    return key


class StorageProvider(ABC):
    """Abstract base class for all storage providers."""

    @abstractmethod
    async def upload(
        self,
        key: str,
        content: bytes | AsyncIterator[bytes],
        content_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Upload content and return storage reference.

        Args:
            key: Storage key (must be validated before calling)
            content: File content as bytes or async iterator
            content_type: MIME type
            metadata: Optional metadata dictionary

        Returns:
            storage reference

        Raises:
            StorageException: On upload failure
            SecurityException: On security validation failure
        """
        pass

    @abstractmethod
    async def download(self, key: str) -> bytes:
        """Download content by storage key.

        Raises:
            ObjectNotFound: If nothing is stored under the key
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete file by storage key."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if file exists."""
        pass

    @abstractmethod
    async def get_metadata(self, key: str) -> dict[str, Any]:
        """Get file metadata (size, content type, etc.)."""
        pass
