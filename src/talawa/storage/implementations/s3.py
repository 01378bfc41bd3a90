"""S3-compatible storage provider (AWS S3, MinIO)."""

from collections.abc import AsyncIterable, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

try:
    import aioboto3
    from botocore.config import Config
    from botocore.exceptions import ClientError

    _s3_available = True
except ImportError:
    aioboto3 = None
    Config = None
    ClientError = None
    _s3_available = False

from ...logging import get_logger
from ..base import ObjectNotFound, StorageException, StorageProvider

logger = get_logger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


def _error_code(error: Exception) -> str | None:
    if ClientError is not None and isinstance(error, ClientError):
        return str(error.response.get("Error", {}).get("Code"))
    return None


class S3StorageProvider(StorageProvider):
    """
    Objects stored in one bucket under their storage key.

    Set ``endpoint_url`` to use a self-hosted MinIO server. ``upload_config`` is
    merged into every ``put_object`` call (e.g. ``{"ServerSideEncryption": "AES256"}``).
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        endpoint_url: str | None = None,
        upload_config: dict[str, Any] | None = None,
    ):
        if not _s3_available:
            raise ImportError(
                "aioboto3 is required for S3StorageProvider. "
                "Install with: pip install talawa-api[storage-s3]"
            )

        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.upload_config = dict(upload_config or {})
        self._credentials = {
            "aws_access_key_id": aws_access_key_id,
            "aws_secret_access_key": aws_secret_access_key,
        }
        self.config = Config(region_name=region, retries={"max_attempts": 3, "mode": "adaptive"})
        self._session: Any | None = None

    def _get_session(self) -> Any:
        if self._session is None:
            self._session = aioboto3.Session(region_name=self.region, **self._credentials)
        return self._session

    @asynccontextmanager
    async def _s3(self, operation: str, key: str) -> AsyncIterator[Any]:
        """Open a client and translate botocore failures into storage exceptions."""
        try:
            async with self._get_session().client(
                "s3", config=self.config, endpoint_url=self.endpoint_url
            ) as client:
                yield client
        except ObjectNotFound:
            raise
        except Exception as e:
            if _error_code(e) in _MISSING_CODES:
                raise ObjectNotFound(f"Object not found: {key}") from e
            logger.error(
                "S3 operation failed",
                operation=operation,
                key=key,
                bucket=self.bucket,
                error=str(e),
            )
            raise StorageException(f"S3 {operation} failed: {e}") from e

    async def upload(
        self,
        key: str,
        content: bytes | AsyncIterable[bytes],
        content_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        if not isinstance(content, bytes):
            content = b"".join([chunk async for chunk in content])

        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": content,
            "ContentType": content_type,
            **self.upload_config,
        }
        if metadata:
            # S3 user metadata keys become HTTP headers; values must be strings
            params["Metadata"] = {
                name.replace("-", "_").replace(" ", "_"): str(value)
                for name, value in metadata.items()
            }

        async with self._s3("upload", key) as s3:
            await s3.put_object(**params)
        return f"s3://{self.bucket}/{key}"

    async def download(self, key: str) -> bytes:
        async with self._s3("download", key) as s3:
            response = await s3.get_object(Bucket=self.bucket, Key=key)
            return await response["Body"].read()

    async def delete(self, key: str) -> bool:
        async with self._s3("delete", key) as s3:
            await s3.delete_object(Bucket=self.bucket, Key=key)
        return True

    async def exists(self, key: str) -> bool:
        try:
            await self.get_metadata(key)
        except ObjectNotFound:
            return False
        return True

    async def get_metadata(self, key: str) -> dict[str, Any]:
        async with self._s3("head", key) as s3:
            response = await s3.head_object(Bucket=self.bucket, Key=key)

        return {
            "size": response.get("ContentLength", 0),
            "last_modified": response.get("LastModified"),
            "content_type": response.get("ContentType"),
            "etag": response.get("ETag", "").strip('"'),
            **response.get("Metadata", {}),
        }
