from typing import Optional
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uam.database import Base
import enum


class AssetStatus(str, enum.Enum):
    IN_USE = "in_use"
    IN_STORAGE = "in_storage"
    UNDER_REPAIR = "under_repair"
    DISPOSED = "disposed"      # terminal: placement is cleared
    LOST = "lost"


class Asset(Base):
    """Inventoried asset with its current placement (section + location)."""
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String(100), nullable=False)
    serial_number = Column(String(100), nullable=True, index=True)
    inventory_code = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Current placement, NULL once disposed
    current_section_id = Column(Integer, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True, index=True)
    current_location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True)

    supplier_company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True)
    purchase_date = Column(Date, nullable=True)
    invoice_number = Column(String(50), nullable=True)
    warranty_expiry_date = Column(Date, nullable=True)
    acquisition_procedure = Column(String(200), nullable=True)
    status = Column(Enum(AssetStatus), default=AssetStatus.IN_STORAGE, nullable=False)
    image_url = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    current_section = relationship("Section")
    current_location = relationship("Location")
    supplier_company = relationship("Company")

    @property
    def current_section_name(self) -> Optional[str]:
        return self.current_section.name if self.current_section else None

    @property
    def current_location_name(self) -> Optional[str]:
        return self.current_location.name if self.current_location else None

    @property
    def supplier_company_name(self) -> Optional[str]:
        return self.supplier_company.display_name if self.supplier_company else None

    @property
    def supplier_company_tax_id(self) -> Optional[str]:
        return self.supplier_company.tax_id if self.supplier_company else None
