"""
Serve stored attachment objects
"""

from fastapi import APIRouter, HTTPException, Response

from ...logging import get_logger
from ...storage import (
    ObjectNotFound,
    SecurityException,
    StorageException,
    get_storage_provider,
    validate_storage_key,
)

logger = get_logger(__name__)
router = APIRouter()


@router.get("/{name}")
async def serve_object(name: str) -> Response:
    """Return the bytes stored under `name` with their stored content type."""
    try:
        key = validate_storage_key(name)
    except SecurityException as e:
        logger.warning("Rejected object name", name=name)
        raise HTTPException(status_code=400, detail="Invalid object name") from e

    storage = get_storage_provider()

    try:
        metadata = await storage.get_metadata(key)
        content = await storage.download(key)
    except ObjectNotFound as e:
        logger.info("Object not found", name=name)
        raise HTTPException(status_code=404, detail="Object not found") from e
    except StorageException as e:
        logger.error("Error serving object", name=name, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error") from e

    content_type = metadata.get("content_type") or "application/octet-stream"
    return Response(content=content, media_type=content_type)
