from typing import Optional
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uam.database import Base


class Location(Base):
    """Physical place (office, rack, shelf). Names are unique per section."""
    __tablename__ = "locations"
    __table_args__ = (
        UniqueConstraint("section_id", "name", name="uq_locations_section_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(255), nullable=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    section = relationship("Section")

    @property
    def section_name(self) -> Optional[str]:
        return self.section.name if self.section else None
