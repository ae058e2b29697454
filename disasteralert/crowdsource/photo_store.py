"""
Local storage for uploaded incident photos.
"""

import logging
import os
import re
import time
import uuid
from pathlib import Path
from typing import Optional

from disasteralert.core.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class PhotoStore:
    """
    Writes photos to a directory and returns the public reference.

    Files are named "<epoch millis>-<random>-<sanitized original name>".
    """

    def __init__(self, upload_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save(self, data: bytes, filename: Optional[str] = None) -> str:
        """
        Persist photo bytes.

        Args:
            data: Image bytes
            filename: Original upload filename

        Returns:
            Reference such as "/uploads/1718000000000-3f2a9c1b-photo.jpg"
        """
        base = _UNSAFE_CHARS.sub("_", os.path.basename(filename or "")) or "photo.jpg"
        stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{base}"
        path = self.upload_dir / stored_name
        path.write_bytes(data)

        logger.info(f"Stored photo {stored_name} ({len(data)} bytes)")
        return f"{self.url_prefix}/{stored_name}"

    def delete(self, reference: str) -> None:
        """Remove a stored photo by the reference returned from save()."""
        path = self.upload_dir / os.path.basename(reference)
        path.unlink(missing_ok=True)
        logger.info(f"Removed photo {path.name}")
