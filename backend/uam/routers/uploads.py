import logging
from typing import Tuple
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from uam.models.user import User
from uam.schemas.document import ImageUploadResponse
from uam.auth.jwt import get_current_user
from uam.services.document_storage import (
    DocumentStorage, DocumentRejected, get_image_storage, image_url,
    AVATAR_SUBDIRECTORY, IMAGE_SUBDIRECTORIES, IMAGE_MIME_TYPES
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def store_image(storage: DocumentStorage, file: UploadFile, subdirectory: str) -> Tuple[str, str]:
    """Saves an uploaded image. 400 on wrong type or size."""
    content = await file.read()
    try:
        return storage.save(content, file.filename, file.content_type, subdirectory=subdirectory)
    except DocumentRejected as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


async def attach_image(db: Session, storage: DocumentStorage, file: UploadFile,
                       subdirectory: str, target, field: str) -> str:
    """Stores the image and writes its URL to target.<field>. The file is removed if the commit fails."""
    stored_filename, storage_path = await store_image(storage, file, subdirectory)
    url = image_url(storage_path, stored_filename)
    setattr(target, field, url)
    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.remove(storage_path, stored_filename)
        logger.exception("Saving %s failed, removed %s", field, stored_filename)
        raise
    return url


@router.post("/image", response_model=ImageUploadResponse)
async def upload_image(
    file: UploadFile = File(...),
    storage: DocumentStorage = Depends(get_image_storage),
    current_user: User = Depends(get_current_user)
):
    """Stores an image without linking it. The URL can be used as avatar_url or image_url."""
    stored_filename, storage_path = await store_image(storage, file, AVATAR_SUBDIRECTORY)
    return ImageUploadResponse(
        message="Image uploaded",
        image_url=image_url(storage_path, stored_filename),
    )


@router.get("/images/{subdirectory}/{filename}")
async def get_image(
    subdirectory: str,
    filename: str,
    storage: DocumentStorage = Depends(get_image_storage),
    current_user: User = Depends(get_current_user)
):
    if subdirectory not in IMAGE_SUBDIRECTORIES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    try:
        path = storage.path_for(subdirectory, filename)
    except DocumentRejected:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    if not path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )

    media_types = {ext: mime for mime, ext in IMAGE_MIME_TYPES.items()}
    media_types[".jpeg"] = "image/jpeg"
    return FileResponse(path=path, media_type=media_types.get(path.suffix.lower()))
