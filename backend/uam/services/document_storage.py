"""
File storage for uploads.

Documents (invoices, warranties, ...) live in a private directory and are only
served through the document API. Asset images and avatars are stored under the
same root in their own subdirectories and are served by /api/uploads/images.
"""
import logging
import uuid
from pathlib import Path
from typing import Dict, Optional, Tuple

from uam.config import get_settings

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

IMAGE_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

ASSET_IMAGE_SUBDIRECTORY = "asset_images"
AVATAR_SUBDIRECTORY = "avatars"
IMAGE_SUBDIRECTORIES = (ASSET_IMAGE_SUBDIRECTORY, AVATAR_SUBDIRECTORY)


class DocumentRejected(Exception):
    """The upload does not meet the type or size requirements."""


class DocumentStorage:
    def __init__(self, root: Optional[str] = None, subdirectory: Optional[str] = None,
                 max_bytes: Optional[int] = None, allowed_types: Optional[Dict[str, str]] = None):
        settings = get_settings()
        self.root = Path(root or settings.upload_root)
        self.subdirectory = subdirectory or settings.upload_subdirectory
        self.max_bytes = max_bytes or settings.max_upload_bytes
        self.allowed_types = allowed_types or ALLOWED_MIME_TYPES

    def validate(self, content: bytes, mime_type: Optional[str]) -> None:
        if mime_type not in self.allowed_types:
            accepted = ", ".join(ext.lstrip(".").upper() for ext in self.allowed_types.values())
            raise DocumentRejected(f"File type not allowed. Accepted: {accepted}.")
        if len(content) > self.max_bytes:
            raise DocumentRejected(
                f"The file is too large. Maximum: {self.max_bytes // (1024 * 1024)} MB."
            )

    def save(self, content: bytes, original_filename: str, mime_type: str,
             subdirectory: Optional[str] = None) -> Tuple[str, str]:
        """Writes the file under a random name. Returns (stored_filename, storage_path)."""
        self.validate(content, mime_type)
        subdirectory = subdirectory or self.subdirectory
        extension = Path(original_filename or "").suffix.lower() or self.allowed_types[mime_type]
        stored_filename = f"{uuid.uuid4()}{extension}"

        directory = self.root / subdirectory
        directory.mkdir(parents=True, exist_ok=True)
        (directory / stored_filename).write_bytes(content)

        logger.info("Stored upload %s/%s (%s bytes)", subdirectory, stored_filename, len(content))
        return stored_filename, subdirectory

    def remove(self, storage_path: str, stored_filename: str) -> None:
        """Deletes a stored file. Missing files are ignored."""
        path = self.path_for(storage_path, stored_filename)
        path.unlink(missing_ok=True)
        logger.info("Removed upload %s/%s", storage_path, stored_filename)

    def path_for(self, storage_path: str, stored_filename: str) -> Path:
        """Absolute path of a stored file, derived from its metadata only."""
        root = self.root.resolve()
        path = (root / storage_path / stored_filename).resolve()
        if root not in path.parents:
            raise DocumentRejected("Invalid document path")
        return path


def image_url(storage_path: str, stored_filename: str) -> str:
    return f"/api/uploads/images/{storage_path}/{stored_filename}"


def get_document_storage() -> DocumentStorage:
    """FastAPI dependency."""
    return DocumentStorage()


def get_image_storage() -> DocumentStorage:
    """FastAPI dependency for asset images and avatars."""
    settings = get_settings()
    return DocumentStorage(
        subdirectory=AVATAR_SUBDIRECTORY,
        max_bytes=settings.max_image_bytes,
        allowed_types=IMAGE_MIME_TYPES,
    )
