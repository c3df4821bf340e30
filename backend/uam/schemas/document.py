from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DocumentResponse(BaseModel):
    id: int
    original_filename: str
    mime_type: str
    file_size_bytes: int
    storage_path: str
    entity_type: Optional[str]
    entity_id: Optional[int]
    document_category: Optional[str]
    description: Optional[str]
    uploaded_by_user_id: Optional[int]
    uploaded_by_user_name: Optional[str] = None
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class DocumentUploadResponse(BaseModel):
    message: str
    document_id: int
    file_name: str
    file_path: str


class ImageUploadResponse(BaseModel):
    message: str
    image_url: str
