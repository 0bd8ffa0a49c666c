"""Multipart image reading shared by the post and avatar endpoints."""

from __future__ import annotations

from fastapi import HTTPException, UploadFile, status

from core import settings
from services.errors import InvalidOperation
from services.images import UploadTooLargeError, read_upload_file


async def read_image_upload(upload: UploadFile) -> bytes:
    try:
        return await read_upload_file(upload, settings.upload_max_bytes)
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except ValueError as exc:
        raise InvalidOperation(str(exc)) from exc
