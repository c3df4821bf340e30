from typing import Optional
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uam.database import Base
import enum


class LicenseType(str, enum.Enum):
    OEM = "oem"
    RETAIL = "retail"
    VOLUME_MAK = "volume_mak"
    VOLUME_KMS = "volume_kms"
    SUBSCRIPTION_USER = "subscription_user"
    SUBSCRIPTION_DEVICE = "subscription_device"
    CONCURRENT = "concurrent"
    FREEWARE = "freeware"
    OPEN_SOURCE = "open_source"
    OTHER = "other"


class SoftwareLicense(Base):
    """Software license, installable on several assets."""
    __tablename__ = "software_licenses"

    id = Column(Integer, primary_key=True, index=True)
    software_name = Column(String(255), nullable=False, index=True)
    software_version = Column(String(100), nullable=True)
    license_key = Column(String(255), nullable=True, index=True)
    license_type = Column(Enum(LicenseType), nullable=False)
    seats = Column(Integer, default=1, nullable=False)
    purchase_date = Column(Date, nullable=True)
    purchase_cost = Column(Numeric(12, 2), nullable=True)
    expiry_date = Column(Date, nullable=True)
    supplier_company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True)
    invoice_number = Column(String(100), nullable=True)
    assigned_to_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    supplier_company = relationship("Company")
    assigned_to_user = relationship("User")
    assignments = relationship(
        "AssetSoftwareLicenseAssignment",
        back_populates="software_license",
        cascade="all, delete-orphan"
    )

    @property
    def supplier_name(self) -> Optional[str]:
        return self.supplier_company.display_name if self.supplier_company else None

    @property
    def assigned_user_name(self) -> Optional[str]:
        return self.assigned_to_user.full_name if self.assigned_to_user else None

    @property
    def assigned_assets_count(self) -> int:
        return len([a for a in self.assignments if a.asset and a.asset.deleted_at is None])


class AssetSoftwareLicenseAssignment(Base):
    """Installation of a license on an asset."""
    __tablename__ = "asset_software_license_assignments"

    id = Column(Integer, primary_key=True, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    software_license_id = Column(Integer, ForeignKey("software_licenses.id", ondelete="CASCADE"), nullable=False, index=True)
    installation_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    asset = relationship("Asset")
    software_license = relationship("SoftwareLicense", back_populates="assignments")
