import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status, UploadFile, File
from fastapi.responses import JSONResponse, Response, StreamingResponse
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from uam.database import get_db
from uam.models.user import User
from uam.models.asset import Asset, AssetStatus
from uam.models.company import Company
from uam.models.location import Location
from uam.models.section import Section
from uam.schemas.asset import (
    AssetCreate, AssetUpdate, AssetResponse, AssetBatchCreate, asset_values,
    AssetExportRequest, AssetImportResponse, AssetImportRowError, ExportColumn
)
from uam.schemas.asset_transfer import (
    AssetMoveRequest, AssetMoveResponse, AssetMovementResponse, MovementReportFilters
)
from uam.schemas.document import DocumentResponse, ImageUploadResponse
from uam.schemas.software_license import AssetLinkedLicense
from uam.auth.jwt import get_current_user
from uam.routers.documents import list_entity_documents, ENTITY_ASSET
from uam.routers.reports import movement_filters
from uam.routers.software_licenses import list_asset_licenses
from uam.routers.uploads import attach_image
from uam.services.asset_export import query_filtered_assets, assets_to_csv, asset_export_value
from uam.services.asset_import import AssetCSVImportService, decode_csv
from uam.services.document_storage import DocumentStorage, get_image_storage, ASSET_IMAGE_SUBDIRECTORY
from uam.services.asset_transfer import (
    AssetTransferService, TransferNotFound, TransferForbidden, TransferConflict
)
from uam.services.movement_history import get_asset_movements, search_movements
from uam.services.pdf_renderer import PdfRendererClient, PdfRenderError, get_pdf_renderer, render_html

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_PDF_COLUMNS = [
    ExportColumn(uid="product_name", name="Product"),
    ExportColumn(uid="inventory_code", name="Inventory code"),
    ExportColumn(uid="serial_number", name="Serial number"),
    ExportColumn(uid="current_section_name", name="Section"),
    ExportColumn(uid="current_location_name", name="Location"),
    ExportColumn(uid="status", name="Status"),
]


def get_active_asset(db: Session, asset_id: int) -> Asset:
    asset = db.query(Asset).filter(
        Asset.id == asset_id,
        Asset.deleted_at.is_(None)
    ).first()
    if not asset:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Asset not found"
        )
    return asset


def check_asset_unique(db: Session, inventory_code: str, serial_number: Optional[str], exclude_id: Optional[int] = None):
    """Inventory code and serial number are unique among active assets."""
    for column, value, label in (
        (Asset.inventory_code, inventory_code, "inventory code"),
        (Asset.serial_number, serial_number, "serial number"),
    ):
        if not value:
            continue
        query = db.query(Asset.id).filter(column == value, Asset.deleted_at.is_(None))
        if exclude_id:
            query = query.filter(Asset.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"An asset with this {label} already exists: {value}"
            )


def check_asset_references(db: Session, data: dict):
    """Section must be active, the location must belong to it, supplier must exist."""
    section_id = data.get("current_section_id")
    if section_id and not db.query(Section).filter(
        Section.id == section_id,
        Section.deleted_at.is_(None)
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Section does not exist or is inactive"
        )
    location_id = data.get("current_location_id")
    if location_id and not db.query(Location).filter(
        Location.id == location_id,
        Location.section_id == section_id
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Location does not exist in the given section"
        )
    supplier_id = data.get("supplier_company_id")
    if supplier_id and not db.query(Company).filter(Company.id == supplier_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Supplier company does not exist"
        )


def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


# ============== Assets ==============

@router.get("", response_model=List[AssetResponse])
async def get_assets(
    search: Optional[str] = None,
    status_filter: Optional[AssetStatus] = Query(None, alias="status"),
    section_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Active assets, newest first."""
    query = db.query(Asset).options(
        joinedload(Asset.current_section),
        joinedload(Asset.current_location),
        joinedload(Asset.supplier_company),
    ).filter(Asset.deleted_at.is_(None))
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Asset.product_name.ilike(pattern),
            Asset.inventory_code.ilike(pattern),
            Asset.serial_number.ilike(pattern)
        ))
    if status_filter:
        query = query.filter(Asset.status == status_filter)
    if section_id:
        query = query.filter(Asset.current_section_id == section_id)
    return query.order_by(Asset.created_at.desc(), Asset.id.desc()).all()


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    asset_data: AssetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    check_asset_unique(db, asset_data.inventory_code, asset_data.serial_number)
    data = asset_values(asset_data)
    check_asset_references(db, data)

    asset = Asset(**data)
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


@router.post("/batch", response_model=List[AssetResponse], status_code=status.HTTP_201_CREATED)
async def create_assets_batch(
    batch: AssetBatchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Creates one asset per serial number with shared data. The inventory code
    gets a running suffix. All or nothing.
    """
    serials = [s.strip() for s in batch.serial_numbers]
    if any(not s for s in serials) or len(set(serials)) != len(serials):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Serial numbers must be non-empty and unique"
        )

    base = asset_values(batch.common_data)
    check_asset_references(db, base)

    assets = []
    for index, serial in enumerate(serials, start=1):
        inventory_code = base["inventory_code"] if len(serials) == 1 else f"{base['inventory_code']}-{index}"
        check_asset_unique(db, inventory_code, serial)
        assets.append(Asset(**{**base, "inventory_code": inventory_code, "serial_number": serial}))

    db.add_all(assets)
    db.commit()
    for asset in assets:
        db.refresh(asset)
    return assets


# ============== Export / Import ==============

@router.post("/export/csv")
async def export_assets_csv(
    payload: AssetExportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """CSV with a fixed column order, re-importable via /import-csv."""
    assets = query_filtered_assets(db, payload)
    if not assets:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No assets match the filters"
        )
    filename = f"assets_{datetime.now().strftime('%Y-%m-%d')}.csv"
    return StreamingResponse(
        iter([assets_to_csv(assets)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.post("/export/pdf")
async def export_assets_pdf(
    payload: AssetExportRequest,
    db: Session = Depends(get_db),
    renderer: PdfRendererClient = Depends(get_pdf_renderer),
    current_user: User = Depends(get_current_user)
):
    assets = query_filtered_assets(db, payload)
    if not assets:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No assets match the filters"
        )
    columns = payload.columns or DEFAULT_PDF_COLUMNS
    rows = [[asset_export_value(asset, column.uid) for column in columns] for asset in assets]
    html = render_html(
        "assets_list.html",
        columns=columns,
        rows=rows,
        generated_at=datetime.now(),
    )
    try:
        pdf = renderer.render(html, landscape=len(columns) > 6)
    except PdfRenderError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
    return pdf_response(pdf, f"assets_{datetime.now().strftime('%Y-%m-%d')}.pdf")


@router.post("/import-csv", response_model=AssetImportResponse)
async def import_assets_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Imports assets from CSV (comma or semicolon separated).

    - 201: all rows imported
    - 207: some rows imported, the failing rows are listed
    - 400: no row imported, nothing is stored
    """
    if not (file.filename or "").lower().endswith(".csv") and file.content_type != "text/csv":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed"
        )

    text = decode_csv(await file.read())
    try:
        result = AssetCSVImportService(db).run(text)
    except Exception:
        db.rollback()
        logger.exception("CSV import failed")
        raise

    if result.success_count == 0 and result.error_count == 0:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The CSV file contains no data rows"
        )

    if result.success_count == 0:
        db.rollback()
        status_code = status.HTTP_400_BAD_REQUEST
        message = "Import failed. No asset was created."
    else:
        db.commit()
        if result.error_count:
            status_code = status.HTTP_207_MULTI_STATUS
            message = f"Partial import: {result.success_count} assets created, {result.error_count} rows with errors."
        else:
            status_code = status.HTTP_201_CREATED
            message = f"Import completed: {result.success_count} assets created."

    response = AssetImportResponse(
        message=message,
        success_count=result.success_count,
        error_count=result.error_count,
        errors=[AssetImportRowError(row=e.row, messages=e.messages, data=e.data) for e in result.errors],
        created_asset_ids=result.created_asset_ids if result.success_count else [],
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


# ============== Single asset ==============

@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(
    asset_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_active_asset(db, asset_id)


@router.put("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: int,
    asset_data: AssetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    asset = get_active_asset(db, asset_id)
    if asset.status == AssetStatus.DISPOSED and asset_data.status != AssetStatus.DISPOSED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A disposed asset cannot be put back into service"
        )
    check_asset_unique(db, asset_data.inventory_code, asset_data.serial_number, exclude_id=asset_id)
    data = asset_values(asset_data)
    check_asset_references(db, data)

    for field, value in data.items():
        setattr(asset, field, value)

    db.commit()
    db.refresh(asset)
    return asset


@router.delete("/{asset_id}")
async def delete_asset(
    asset_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Soft delete. The movement history stays."""
    asset = get_active_asset(db, asset_id)
    asset.deleted_at = datetime.now(timezone.utc)
    db.commit()
    return {"message": "Asset deleted"}


# ============== Movements ==============

@router.post("/{asset_id}/move", response_model=AssetMoveResponse)
async def move_asset(
    asset_id: int,
    move_data: AssetMoveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Moves an asset to another section/location or disposes of it.
    The authorizing user must be the logged-in user. Writes one audit row.
    """
    service = AssetTransferService(db)
    try:
        result = service.move(asset_id, move_data, caller_id=current_user.id)
    except TransferNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except TransferForbidden as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except TransferConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error while moving the asset"
        )

    return AssetMoveResponse(
        message="Asset movement recorded",
        transfer_id=result.transfer_id,
        asset_id=result.asset_id,
    )


@router.get("/{asset_id}/movements", response_model=List[AssetMovementResponse])
async def get_movements(
    asset_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Movement history of the asset, newest first."""
    get_active_asset(db, asset_id)
    return get_asset_movements(db, asset_id)


@router.get("/{asset_id}/movements/pdf")
async def get_movements_pdf(
    asset_id: int,
    filters: MovementReportFilters = Depends(movement_filters),
    db: Session = Depends(get_db),
    renderer: PdfRendererClient = Depends(get_pdf_renderer),
    current_user: User = Depends(get_current_user)
):
    """Movement history as PDF. Accepts the filters of the movement report."""
    asset = get_active_asset(db, asset_id)
    filtered = any(value is not None for value in filters.model_dump().values())
    filters.asset_id = asset_id
    html = render_html(
        "asset_movements.html",
        asset=asset,
        movements=search_movements(db, filters),
        filtered=filtered,
    )
    try:
        pdf = renderer.render(html)
    except PdfRenderError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e)
        )
    return pdf_response(pdf, f"movements_{asset.inventory_code}.pdf")


# ============== Linked records ==============

@router.get("/{asset_id}/software-licenses", response_model=List[AssetLinkedLicense])
async def get_asset_software_licenses(
    asset_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    get_active_asset(db, asset_id)
    return list_asset_licenses(db, asset_id)


@router.get("/{asset_id}/documents", response_model=List[DocumentResponse])
async def get_asset_documents(
    asset_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    get_active_asset(db, asset_id)
    return list_entity_documents(db, ENTITY_ASSET, asset_id)


# ============== Image ==============

@router.post("/{asset_id}/image", response_model=ImageUploadResponse)
async def upload_asset_image(
    asset_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: DocumentStorage = Depends(get_image_storage),
    current_user: User = Depends(get_current_user)
):
    """Stores the image and sets it as the asset's image_url."""
    asset = get_active_asset(db, asset_id)
    url = await attach_image(db, storage, file, ASSET_IMAGE_SUBDIRECTORY, asset, "image_url")
    return ImageUploadResponse(message="Asset image updated", image_url=url)
