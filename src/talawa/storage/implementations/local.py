"""Local filesystem storage provider for development and self-hosted deployments."""

import json
from collections.abc import AsyncIterable
from pathlib import Path
from typing import Any

import aiofiles

from ...logging import get_logger
from ..base import ObjectNotFound, SecurityException, StorageException, StorageProvider

logger = get_logger(__name__)


class LocalStorageProvider(StorageProvider):
    """Local filesystem storage with path traversal protection."""

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_safe_file_path(self, key: str) -> Path:
        """Get file path with security validation."""
        file_path = (self.base_path / key).resolve()

        try:
            file_path.relative_to(self.base_path)
        except ValueError as e:
            raise SecurityException(f"Path traversal detected: {key}") from e

        return file_path

    @staticmethod
    def _metadata_path(file_path: Path) -> Path:
        return file_path.with_suffix(file_path.suffix + ".meta")

    async def upload(
        self,
        key: str,
        content: bytes | bytearray | memoryview | AsyncIterable[bytes],
        content_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        logger.info("Uploading file", key=key, content_type=content_type)
        try:
            file_path = self._get_safe_file_path(key)
            file_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(file_path, "wb") as f:
                if isinstance(content, bytes | bytearray | memoryview):
                    await f.write(content)
                else:
                    async for chunk in content:
                        await f.write(chunk)

            # The content type is needed to serve the object back, so it is always stored.
            stored_metadata = {"content_type": content_type, **(metadata or {})}
            try:
                async with aiofiles.open(self._metadata_path(file_path), "w") as f:
                    await f.write(json.dumps(stored_metadata, indent=2))
            except OSError as e:
                logger.warning("Failed to write metadata", key=key, error=str(e))

            logger.debug("Successfully uploaded to local storage", key=key)
            return f"file://{file_path}"

        except SecurityException:
            raise
        except OSError as e:
            logger.error("File system error uploading", key=key, error=str(e))
            raise StorageException(f"Failed to write file: {e}") from e

    async def download(self, key: str) -> bytes:
        """Download file content from local storage."""
        file_path = self._get_safe_file_path(key)

        if not file_path.is_file():
            raise ObjectNotFound(f"File not found: {key}")

        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except OSError as e:
            logger.error("File system error downloading", key=key, error=str(e))
            raise StorageException(f"Failed to read file: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete file by storage key."""
        try:
            file_path = self._get_safe_file_path(key)

            if not file_path.exists():
                return False

            file_path.unlink()

            metadata_path = self._metadata_path(file_path)
            if metadata_path.exists():
                metadata_path.unlink()

            logger.debug("Successfully deleted from local storage", key=key)
            return True

        except OSError as e:
            logger.error("File system error deleting", key=key, error=str(e))
            raise StorageException(f"Failed to delete file: {e}") from e

    async def exists(self, key: str) -> bool:
        """Check if file exists."""
        try:
            return self._get_safe_file_path(key).is_file()
        except SecurityException:
            return False

    async def get_metadata(self, key: str) -> dict[str, Any]:
        """Get file metadata (size, modified date, content type)."""
        file_path = self._get_safe_file_path(key)

        if not file_path.is_file():
            raise ObjectNotFound(f"File not found: {key}")

        stat = file_path.stat()

        stored_metadata = {}
        metadata_path = self._metadata_path(file_path)
        if metadata_path.exists():
            try:
                async with aiofiles.open(metadata_path) as f:
                    stored_metadata = json.loads(await f.read())
            except (OSError, ValueError) as e:
                logger.warning("Failed to load metadata", key=key, error=str(e))

        return {
            "size": stat.st_size,
            "modified_time": stat.st_mtime,
            **stored_metadata,
        }
