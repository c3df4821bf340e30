"""
Filtered asset queries shared by the CSV and PDF exports.
"""
import csv
import io
from typing import List
from sqlalchemy import false, func
from sqlalchemy.orm import Session, joinedload

from uam.models.asset import Asset, AssetStatus
from uam.models.company import Company
from uam.models.location import Location
from uam.models.section import Section
from uam.schemas.asset import AssetExportRequest

# Fixed column order of the CSV file. Matches the columns the CSV import reads.
CSV_EXPORT_COLUMNS = [
    "product_name",
    "serial_number",
    "inventory_code",
    "description",
    "current_section_name",
    "current_location_name",
    "supplier_company_tax_id",
    "purchase_date",
    "invoice_number",
    "warranty_expiry_date",
    "acquisition_procedure",
    "status",
    "image_url",
]

SORT_COLUMNS = {
    "product_name": Asset.product_name,
    "serial_number": Asset.serial_number,
    "inventory_code": Asset.inventory_code,
    "current_section_name": Section.name,
    "status": Asset.status,
    "purchase_date": Asset.purchase_date,
    "warranty_expiry_date": Asset.warranty_expiry_date,
}

SEARCH_COLUMNS = {
    "product_name": Asset.product_name,
    "serial_number": Asset.serial_number,
    "inventory_code": Asset.inventory_code,
    "description": Asset.description,
    "invoice_number": Asset.invoice_number,
    "acquisition_procedure": Asset.acquisition_procedure,
    "current_section_name": Section.name,
    "current_location_name": Location.name,
    "supplier_company_name": func.coalesce(Company.trade_name, Company.legal_name),
}


def query_filtered_assets(db: Session, payload: AssetExportRequest) -> List[Asset]:
    """Active assets matching the export filters, in the requested order."""
    query = (
        db.query(Asset)
        .outerjoin(Section, Asset.current_section_id == Section.id)
        .outerjoin(Location, Asset.current_location_id == Location.id)
        .outerjoin(Company, Asset.supplier_company_id == Company.id)
        .options(
            joinedload(Asset.current_section),
            joinedload(Asset.current_location),
            joinedload(Asset.supplier_company),
        )
        .filter(Asset.deleted_at.is_(None))
    )

    filters = payload.filters
    if filters.search_text and filters.search_attribute:
        pattern = f"%{filters.search_text}%"
        if filters.search_attribute == "status":
            # "under repair" matches "under_repair"
            text = filters.search_text.lower()
            spaced = text.replace(" ", "_")
            matches = [s for s in AssetStatus if text in s.value or spaced in s.value]
            query = query.filter(Asset.status.in_(matches)) if matches else query.filter(false())
        elif filters.search_attribute in SEARCH_COLUMNS:
            query = query.filter(SEARCH_COLUMNS[filters.search_attribute].ilike(pattern))
    if filters.status:
        query = query.filter(Asset.status.in_(filters.status))
    if filters.purchase_date_from:
        query = query.filter(Asset.purchase_date >= filters.purchase_date_from)
    if filters.purchase_date_to:
        query = query.filter(Asset.purchase_date <= filters.purchase_date_to)

    sort = payload.sort
    column = SORT_COLUMNS.get(sort.column, Asset.product_name) if sort.column else Asset.product_name
    order = column.desc() if sort.direction == "descending" else column.asc()
    return query.order_by(order, Asset.id).all()


def asset_export_value(asset: Asset, column: str) -> str:
    value = getattr(asset, column, None)
    if value is None:
        return ""
    if hasattr(value, "value"):  # enum
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def assets_to_csv(assets: List[Asset]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_EXPORT_COLUMNS)
    for asset in assets:
        writer.writerow([asset_export_value(asset, column) for column in CSV_EXPORT_COLUMNS])
    return output.getvalue()
