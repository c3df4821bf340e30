from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from uam.models.software_license import LicenseType


class SoftwareLicenseBase(BaseModel):
    software_name: str = Field(min_length=1, max_length=255)
    software_version: Optional[str] = Field(default=None, max_length=100)
    license_key: Optional[str] = Field(default=None, max_length=255)
    license_type: LicenseType
    seats: int = Field(default=1, ge=1)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[Decimal] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None
    supplier_company_id: Optional[int] = Field(default=None, gt=0)
    invoice_number: Optional[str] = Field(default=None, max_length=100)
    assigned_to_user_id: Optional[int] = Field(default=None, gt=0)
    notes: Optional[str] = None


class SoftwareLicenseCreate(SoftwareLicenseBase):
    assign_to_asset_ids: List[int] = []


class SoftwareLicenseUpdate(BaseModel):
    software_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    software_version: Optional[str] = Field(default=None, max_length=100)
    license_key: Optional[str] = Field(default=None, max_length=255)
    license_type: Optional[LicenseType] = None
    seats: Optional[int] = Field(default=None, ge=1)
    purchase_date: Optional[date] = None
    purchase_cost: Optional[Decimal] = Field(default=None, ge=0)
    expiry_date: Optional[date] = None
    supplier_company_id: Optional[int] = Field(default=None, gt=0)
    invoice_number: Optional[str] = Field(default=None, max_length=100)
    assigned_to_user_id: Optional[int] = Field(default=None, gt=0)
    notes: Optional[str] = None
    assign_to_asset_ids: Optional[List[int]] = None  # given -> replaces assignments


class AssignedAssetInfo(BaseModel):
    assignment_id: int
    asset_id: int
    asset_product_name: Optional[str]
    asset_inventory_code: Optional[str]
    installation_date: Optional[date]
    assignment_notes: Optional[str]


class SoftwareLicenseResponse(SoftwareLicenseBase):
    id: int
    supplier_name: Optional[str] = None
    assigned_user_name: Optional[str] = None
    assigned_assets_count: int = 0
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class SoftwareLicenseDetailResponse(SoftwareLicenseResponse):
    assigned_assets: List[AssignedAssetInfo] = []


class AssetLinkedLicense(BaseModel):
    """License as seen from an asset."""
    software_license_id: int
    software_name: str
    software_version: Optional[str]
    license_key: Optional[str]
    license_type: LicenseType
    seats: Optional[int]
    expiry_date: Optional[date]
    installation_date_on_asset: Optional[date]
    assignment_notes: Optional[str]
