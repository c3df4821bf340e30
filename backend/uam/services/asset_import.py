"""
CSV import of assets.
Rows are validated and inserted one by one; failing rows are collected with
their line number instead of aborting the import.
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from pydantic import ValidationError
from sqlalchemy.orm import Session

from uam.models.asset import Asset, AssetStatus
from uam.models.company import Company
from uam.models.location import Location
from uam.models.section import Section
from uam.schemas.asset import AssetCreate, asset_values

logger = logging.getLogger(__name__)

OPTIONAL_TEXT_COLUMNS = [
    "serial_number",
    "description",
    "purchase_date",
    "invoice_number",
    "warranty_expiry_date",
    "acquisition_procedure",
    "image_url",
]


def detect_csv_delimiter(text: str) -> str:
    """Comma or semicolon, whichever the header line uses more."""
    first_line = text.split('\n')[0] if '\n' in text else text
    if first_line.count(';') > first_line.count(','):
        return ';'
    return ','


def create_csv_reader(text: str) -> csv.DictReader:
    reader = csv.DictReader(io.StringIO(text), delimiter=detect_csv_delimiter(text))
    # "Product Name" -> "product_name"
    if reader.fieldnames:
        reader.fieldnames = ["_".join(name.strip().lower().split()) for name in reader.fieldnames]
    return reader


def decode_csv(content: bytes) -> str:
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        return content.decode('latin-1')


@dataclass
class RowError:
    row: int
    messages: List[str]
    data: Dict[str, str]


@dataclass
class ImportResult:
    created_asset_ids: List[int] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.created_asset_ids)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class RowRejected(Exception):
    def __init__(self, *messages: str):
        super().__init__(messages[0] if messages else "")
        self.messages = list(messages)


class AssetCSVImportService:
    """Imports assets from CSV text. Commit/rollback is left to the caller."""

    def __init__(self, db: Session):
        self.db = db

    def run(self, text: str) -> ImportResult:
        result = ImportResult()
        reader = create_csv_reader(text)

        for row_num, raw in enumerate(reader, start=2):  # header is line 1
            row = {k: (v or "").strip() for k, v in raw.items() if k}
            if not any(row.values()):
                continue
            try:
                asset = self._build_asset(row)
            except RowRejected as e:
                result.errors.append(RowError(row=row_num, messages=e.messages, data=row))
                continue
            self.db.add(asset)
            self.db.flush()
            result.created_asset_ids.append(asset.id)

        logger.info(
            "CSV import: %s assets created, %s rows rejected",
            result.success_count, result.error_count
        )
        return result

    def _build_asset(self, row: Dict[str, str]) -> Asset:
        section_name = row.get("current_section_name")
        if not section_name:
            raise RowRejected("'current_section_name' is required")
        section = self.db.query(Section).filter(
            Section.name == section_name,
            Section.deleted_at.is_(None)
        ).first()
        if not section:
            raise RowRejected(f"Section '{section_name}' not found or inactive")

        location_id: Optional[int] = None
        location_name = row.get("current_location_name")
        if location_name:
            location = self.db.query(Location).filter(
                Location.name == location_name,
                Location.section_id == section.id
            ).first()
            if not location:
                raise RowRejected(f"Location '{location_name}' not found in section '{section_name}'")
            location_id = location.id

        supplier_id: Optional[int] = None
        tax_id = row.get("supplier_company_tax_id")
        if tax_id:
            company = self.db.query(Company).filter(Company.tax_id == tax_id).first()
            if not company:
                raise RowRejected(f"Supplier company with tax ID '{tax_id}' not found")
            supplier_id = company.id

        data = {column: row.get(column) or None for column in OPTIONAL_TEXT_COLUMNS}
        data.update(
            product_name=row.get("product_name", ""),
            inventory_code=row.get("inventory_code", ""),
            current_section_id=section.id,
            current_location_id=location_id,
            supplier_company_id=supplier_id,
            status=row.get("status") or AssetStatus.IN_STORAGE,
        )
        try:
            validated = AssetCreate(**data)
        except ValidationError as e:
            raise RowRejected(*[
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ])

        existing = self.db.query(Asset.id).filter(
            Asset.inventory_code == validated.inventory_code,
            Asset.deleted_at.is_(None)
        ).first()
        if existing:
            raise RowRejected(f"Inventory code '{validated.inventory_code}' already exists")
        if validated.serial_number:
            existing = self.db.query(Asset.id).filter(
                Asset.serial_number == validated.serial_number,
                Asset.deleted_at.is_(None)
            ).first()
            if existing:
                raise RowRejected(f"Serial number '{validated.serial_number}' already exists")

        return Asset(**asset_values(validated))
