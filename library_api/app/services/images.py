"""
Profile image uploads shared by contacts and authors.

The raw request body is the image.  Its content type picks the file
extension; anything that is not one of the accepted image types, an
empty body or a body above ``settings.max_upload_bytes`` is a
validation failure.  ``read_upload`` refuses an oversized body while
reading it, before it is held in memory.  The previous image of the
record is deleted from the blob store once the new one is stored and
the row updated.
"""

import logging
from typing import Any, Dict, Optional

from starlette.requests import Request

from library_api.app.core import db
from library_api.app.core.config import settings
from library_api.app.core.errors import ValidationFailed
from library_api.app.core.storage import get_blob_store

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def _too_large() -> ValidationFailed:
    kib = settings.max_upload_bytes // 1024
    return ValidationFailed.field("profile_image", f"The profile image field must not be greater than {kib} kilobytes.")


async def read_upload(request: Request) -> bytes:
    """Read the raw request body, stopping once it passes ``max_upload_bytes``."""
    limit = settings.max_upload_bytes
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise _too_large()
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise _too_large()
    return bytes(body)


def validate_image(data: bytes, content_type: Optional[str]) -> str:
    """Return the file extension for an acceptable upload."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type not in EXTENSIONS:
        raise ValidationFailed.field("profile_image", "The profile image field must be an image (png, jpeg, gif, webp).")
    if not data:
        raise ValidationFailed.field("profile_image", "The profile image field is required.")
    if len(data) > settings.max_upload_bytes:
        raise _too_large()
    return EXTENSIONS[media_type]


def replace_image(table: str, row: Dict[str, Any], data: bytes, content_type: Optional[str], directory: str) -> Dict[str, Any]:
    extension = validate_image(data, content_type)
    store = get_blob_store()
    path = store.store(data, directory, extension)
    try:
        updated = db.update(table, row["id"], {"profile_image": path})
    except Exception:
        store.delete(path)
        raise
    if row.get("profile_image"):
        store.delete(row["profile_image"])
    logging.getLogger(__name__).info("Replaced profile image of %s %s", table, row["id"])
    return updated


def remove_image(row: Dict[str, Any]) -> None:
    if row.get("profile_image"):
        get_blob_store().delete(row["profile_image"])
