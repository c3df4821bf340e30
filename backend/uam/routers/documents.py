import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session, joinedload

from uam.database import get_db
from uam.models.user import User
from uam.models.document import Document
from uam.schemas.document import DocumentResponse, DocumentUploadResponse
from uam.auth.jwt import get_current_user
from uam.auth.dependencies import check_owner_or_admin
from uam.services.document_storage import DocumentStorage, DocumentRejected, get_document_storage

logger = logging.getLogger(__name__)

router = APIRouter()

ENTITY_ASSET = "asset"
ENTITY_SOFTWARE_LICENSE = "software_license"


def list_entity_documents(db: Session, entity_type: str, entity_id: int) -> List[Document]:
    """Active documents attached to one entity, newest first."""
    return db.query(Document).options(joinedload(Document.uploaded_by)).filter(
        Document.entity_type == entity_type,
        Document.entity_id == entity_id,
        Document.deleted_at.is_(None)
    ).order_by(Document.created_at.desc(), Document.id.desc()).all()


def get_active_document(db: Session, document_id: int) -> Document:
    document = db.query(Document).filter(
        Document.id == document_id,
        Document.deleted_at.is_(None)
    ).first()
    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    return document


@router.post("/upload", response_model=DocumentUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    entity_type: Optional[str] = Form(None),
    entity_id: Optional[int] = Form(None),
    document_category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_document_storage),
    current_user: User = Depends(get_current_user)
):
    """Stores an uploaded file (PDF or image) and its metadata."""
    if entity_id is not None and entity_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid entity ID"
        )

    content = await file.read()
    try:
        stored_filename, storage_path = storage.save(content, file.filename, file.content_type)
    except DocumentRejected as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    document = Document(
        original_filename=file.filename or stored_filename,
        stored_filename=stored_filename,
        mime_type=file.content_type,
        file_size_bytes=len(content),
        storage_path=storage_path,
        entity_type=entity_type or None,
        entity_id=entity_id,
        document_category=document_category or None,
        description=description or None,
        uploaded_by_user_id=current_user.id,
    )
    db.add(document)
    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.remove(storage_path, stored_filename)
        logger.exception("Saving document metadata failed, removed %s", stored_filename)
        raise
    db.refresh(document)

    return DocumentUploadResponse(
        message="Document uploaded",
        document_id=document.id,
        file_name=document.original_filename,
        file_path=f"{storage_path}/{stored_filename}",
    )


@router.get("", response_model=List[DocumentResponse])
async def get_documents(
    entity_type: str,
    entity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return list_entity_documents(db, entity_type, entity_id)


@router.get("/{document_id}/download")
async def download_document(
    document_id: int,
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_document_storage),
    current_user: User = Depends(get_current_user)
):
    """Serves the file. Only the uploader or an Admin may download it."""
    document = get_active_document(db, document_id)
    check_owner_or_admin(current_user, document.uploaded_by_user_id)

    try:
        path = storage.path_for(document.storage_path, document.stored_filename)
    except DocumentRejected:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found"
        )
    if not path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found on the server"
        )

    return FileResponse(
        path=path,
        filename=document.original_filename,
        media_type=document.mime_type
    )


@router.delete("/{document_id}")
async def delete_document(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Soft delete; the stored file is kept."""
    document = get_active_document(db, document_id)
    check_owner_or_admin(current_user, document.uploaded_by_user_id)

    document.deleted_at = datetime.now(timezone.utc)
    db.commit()
    return {"message": "Document deleted"}
