"""
Local filesystem blob store for uploaded images.

Files are written below a root directory under generated names
(``<directory>/<uuid4 hex><extension>``) and are served back by the
application through a ``StaticFiles`` mount at ``settings.storage_url``.
Records keep only the relative path; ``url_for`` turns it into the
URL returned to clients.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from .config import settings
from .db import resolve_path


class LocalBlobStore:
    """Store, resolve and delete blobs under ``root``."""

    def __init__(self, root: str, base_url: str) -> None:
        self.root = Path(root).resolve()
        self.base_url = base_url.rstrip("/")

    def _absolute(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Path {path!r} escapes the storage root")
        return target

    def store(self, data: bytes, directory: str, extension: str = "") -> str:
        """Persist ``data`` and return its path relative to the root."""
        name = f"{uuid.uuid4().hex}{extension}"
        relative = f"{directory.strip('/')}/{name}"
        target = self._absolute(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as fh:
            fh.write(data)
        logging.getLogger(__name__).info("Stored blob %s (%d bytes)", relative, len(data))
        return relative

    def url_for(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return f"{self.base_url}/{path}"

    def delete(self, path: Optional[str]) -> bool:
        """Remove the blob at ``path``; returns ``False`` if it was absent."""
        if not path:
            return False
        target = self._absolute(path)
        if not target.is_file():
            return False
        os.remove(target)
        logging.getLogger(__name__).info("Deleted blob %s", path)
        return True


def get_blob_store() -> LocalBlobStore:
    """Return a store bound to the currently configured root and URL."""
    return LocalBlobStore(resolve_path(settings.storage_dir), settings.storage_url)
