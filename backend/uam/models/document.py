from typing import Optional
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uam.database import Base


class Document(Base):
    """Uploaded file metadata. The binary lives under the private upload root."""
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    original_filename = Column(String(255), nullable=False)
    stored_filename = Column(String(255), nullable=False, unique=True)
    mime_type = Column(String(100), nullable=False)
    file_size_bytes = Column(Integer, nullable=False)
    storage_path = Column(String(255), nullable=False)  # sub-directory, e.g. "invoices"

    # Polymorphic owner, e.g. ("asset", 42) or ("software_license", 7)
    entity_type = Column(String(50), nullable=True, index=True)
    entity_id = Column(Integer, nullable=True, index=True)

    document_category = Column(String(50), nullable=True)  # e.g. "invoice_purchase"
    description = Column(Text, nullable=True)
    uploaded_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    uploaded_by = relationship("User")

    @property
    def uploaded_by_user_name(self) -> Optional[str]:
        return self.uploaded_by.full_name if self.uploaded_by else None
