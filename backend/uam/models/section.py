from typing import Optional
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uam.database import Base


class Section(Base):
    """Organizational unit. Sections form a tree via parent_section_id."""
    __tablename__ = "sections"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)  # unique among active sections
    management_level = Column(Integer, nullable=True)
    email = Column(String(100), nullable=True)
    parent_section_id = Column(Integer, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft delete

    # Relationships
    parent = relationship("Section", remote_side=[id])

    @property
    def parent_section_name(self) -> Optional[str]:
        return self.parent.name if self.parent else None
