from typing import Optional
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uam.database import Base


class AssetTransfer(Base):
    """Audit record of one asset movement. Append-only, never updated."""
    __tablename__ = "asset_transfers"

    id = Column(Integer, primary_key=True, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=False, index=True)
    transfer_date = Column(DateTime, nullable=False, index=True)

    # Placement of the asset right before the movement
    from_section_id = Column(Integer, ForeignKey("sections.id"), nullable=True)
    from_location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)
    to_section_id = Column(Integer, ForeignKey("sections.id"), nullable=True)
    to_location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)

    authorized_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    received_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    received_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    asset = relationship("Asset")
    from_section = relationship("Section", foreign_keys=[from_section_id])
    from_location = relationship("Location", foreign_keys=[from_location_id])
    to_section = relationship("Section", foreign_keys=[to_section_id])
    to_location = relationship("Location", foreign_keys=[to_location_id])
    authorized_by = relationship("User", foreign_keys=[authorized_by_user_id])
    received_by = relationship("User", foreign_keys=[received_by_user_id])

    @property
    def from_section_name(self) -> Optional[str]:
        return self.from_section.name if self.from_section else None

    @property
    def from_location_name(self) -> Optional[str]:
        return self.from_location.name if self.from_location else None

    @property
    def to_section_name(self) -> Optional[str]:
        return self.to_section.name if self.to_section else None

    @property
    def to_location_name(self) -> Optional[str]:
        return self.to_location.name if self.to_location else None

    @property
    def authorized_by_user_name(self) -> Optional[str]:
        return self.authorized_by.full_name if self.authorized_by else None

    @property
    def authorized_by_user_national_id(self) -> Optional[str]:
        return self.authorized_by.national_id if self.authorized_by else None

    @property
    def received_by_user_name(self) -> Optional[str]:
        return self.received_by.full_name if self.received_by else None

    @property
    def received_by_user_national_id(self) -> Optional[str]:
        return self.received_by.national_id if self.received_by else None

    @property
    def received_by_user_section_name(self) -> Optional[str]:
        return self.received_by.section_name if self.received_by else None
