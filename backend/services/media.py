"""Async wrappers that put the blocking image and storage calls behind service errors."""

from __future__ import annotations

import asyncio
import logging

from .errors import InvalidOperation, UpstreamFailure
from .images import process_image_bytes
from .storage import delete_object, upload_object

logger = logging.getLogger(__name__)


async def prepare_image(data: bytes) -> tuple[bytes, str]:
    try:
        return await asyncio.to_thread(process_image_bytes, data)
    except ValueError as exc:
        raise InvalidOperation(str(exc)) from exc


async def store_image(object_key: str, data: bytes, content_type: str) -> str:
    """Upload processed bytes and return the public URL."""
    try:
        return await asyncio.to_thread(upload_object, object_key, data, content_type)
    except Exception as exc:
        logger.error(
            "Image upload failed",
            extra={"object_key": object_key},
            exc_info=True,
        )
        raise UpstreamFailure("Failed to upload image", detail=str(exc)) from exc


async def discard_object(object_key: str | None) -> None:
    """Delete a stored object, logging instead of failing the request."""
    if not object_key:
        return
    try:
        await asyncio.to_thread(delete_object, object_key)
    except Exception:
        logger.warning(
            "Failed to delete stored object",
            extra={"object_key": object_key},
            exc_info=True,
        )


__all__ = ["discard_object", "prepare_image", "store_image"]
