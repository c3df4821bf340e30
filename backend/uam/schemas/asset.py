from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import date, datetime

from uam.models.asset import AssetStatus


class AssetBase(BaseModel):
    product_name: str = Field(min_length=1, max_length=100)
    serial_number: Optional[str] = Field(default=None, max_length=100)
    inventory_code: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    current_section_id: int = Field(gt=0)
    current_location_id: Optional[int] = Field(default=None, gt=0)
    supplier_company_id: Optional[int] = Field(default=None, gt=0)
    purchase_date: Optional[date] = None
    invoice_number: Optional[str] = Field(default=None, max_length=50)
    warranty_expiry_date: Optional[date] = None
    acquisition_procedure: Optional[str] = Field(default=None, max_length=200)
    status: AssetStatus = AssetStatus.IN_STORAGE
    image_url: Optional[str] = Field(default=None, max_length=255)


class AssetCreate(AssetBase):
    pass


class AssetUpdate(AssetBase):
    pass


def asset_values(asset_data: AssetBase) -> dict:
    """Column values for an asset. Disposed assets have no placement."""
    data = asset_data.model_dump()
    if data["status"] == AssetStatus.DISPOSED:
        data["current_section_id"] = None
        data["current_location_id"] = None
    return data


class AssetBatchCommon(AssetBase):
    """Shared data for several assets that only differ by serial number."""
    serial_number: None = None


class AssetBatchCreate(BaseModel):
    common_data: AssetBatchCommon
    serial_numbers: List[str] = Field(min_length=1)


class AssetResponse(BaseModel):
    id: int
    product_name: str
    serial_number: Optional[str]
    inventory_code: str
    description: Optional[str]
    current_section_id: Optional[int]
    current_section_name: Optional[str] = None
    current_location_id: Optional[int]
    current_location_name: Optional[str] = None
    supplier_company_id: Optional[int]
    supplier_company_name: Optional[str] = None
    supplier_company_tax_id: Optional[str] = None
    purchase_date: Optional[date]
    invoice_number: Optional[str]
    warranty_expiry_date: Optional[date]
    acquisition_procedure: Optional[str]
    status: AssetStatus
    image_url: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


# ============== Export ==============

class AssetExportFilters(BaseModel):
    search_text: Optional[str] = None
    search_attribute: Optional[str] = None
    status: Optional[List[AssetStatus]] = None
    purchase_date_from: Optional[date] = None
    purchase_date_to: Optional[date] = None


class AssetExportSort(BaseModel):
    column: Optional[str] = None
    direction: Literal["ascending", "descending"] = "ascending"


class ExportColumn(BaseModel):
    uid: str
    name: str


class AssetExportRequest(BaseModel):
    filters: AssetExportFilters = AssetExportFilters()
    sort: AssetExportSort = AssetExportSort()
    columns: List[ExportColumn] = []  # PDF only; the CSV layout is fixed


# ============== CSV import ==============

class AssetImportRowError(BaseModel):
    row: int
    messages: List[str]
    data: dict


class AssetImportResponse(BaseModel):
    message: str
    success_count: int
    error_count: int
    errors: List[AssetImportRowError] = []
    created_asset_ids: List[int] = []
