from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from uam.database import get_db
from uam.models.user import User
from uam.models.asset import Asset
from uam.models.company import Company
from uam.models.software_license import SoftwareLicense, AssetSoftwareLicenseAssignment
from uam.schemas.document import DocumentResponse
from uam.schemas.software_license import (
    SoftwareLicenseCreate, SoftwareLicenseUpdate, SoftwareLicenseResponse,
    SoftwareLicenseDetailResponse, AssignedAssetInfo, AssetLinkedLicense
)
from uam.auth.jwt import get_current_user
from uam.routers.documents import list_entity_documents, ENTITY_SOFTWARE_LICENSE

router = APIRouter()


def get_active_license(db: Session, license_id: int) -> SoftwareLicense:
    software_license = db.query(SoftwareLicense).options(
        joinedload(SoftwareLicense.assignments).joinedload(AssetSoftwareLicenseAssignment.asset)
    ).filter(
        SoftwareLicense.id == license_id,
        SoftwareLicense.deleted_at.is_(None)
    ).first()
    if not software_license:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Software license not found"
        )
    return software_license


def check_license_key_unique(db: Session, license_key: Optional[str], exclude_id: Optional[int] = None):
    if not license_key:
        return
    query = db.query(SoftwareLicense).filter(
        SoftwareLicense.license_key == license_key,
        SoftwareLicense.deleted_at.is_(None)
    )
    if exclude_id:
        query = query.filter(SoftwareLicense.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A license with this key already exists"
        )


def check_license_references(db: Session, supplier_company_id: Optional[int], assigned_to_user_id: Optional[int]):
    if supplier_company_id and not db.query(Company).filter(Company.id == supplier_company_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Supplier company does not exist"
        )
    if assigned_to_user_id and not db.query(User).filter(
        User.id == assigned_to_user_id,
        User.deleted_at.is_(None)
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Assigned user does not exist"
        )


def build_assignments(db: Session, asset_ids: List[int]) -> List[AssetSoftwareLicenseAssignment]:
    """New assignment rows for the given assets. All assets must exist."""
    unique_ids = list(dict.fromkeys(asset_ids))
    if not unique_ids:
        return []
    found = {
        row.id for row in db.query(Asset.id).filter(
            Asset.id.in_(unique_ids),
            Asset.deleted_at.is_(None)
        )
    }
    missing = [asset_id for asset_id in unique_ids if asset_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Assets not found: {', '.join(str(i) for i in missing)}"
        )
    today = datetime.now(timezone.utc).date()
    return [AssetSoftwareLicenseAssignment(asset_id=asset_id, installation_date=today) for asset_id in unique_ids]


def license_detail(software_license: SoftwareLicense) -> SoftwareLicenseDetailResponse:
    response = SoftwareLicenseDetailResponse.model_validate(software_license)
    response.assigned_assets = [
        AssignedAssetInfo(
            assignment_id=a.id,
            asset_id=a.asset_id,
            asset_product_name=a.asset.product_name if a.asset else None,
            asset_inventory_code=a.asset.inventory_code if a.asset else None,
            installation_date=a.installation_date,
            assignment_notes=a.notes,
        )
        for a in software_license.assignments
        if a.asset and a.asset.deleted_at is None
    ]
    return response


def list_asset_licenses(db: Session, asset_id: int) -> List[AssetLinkedLicense]:
    """Active licenses installed on one asset."""
    rows = db.query(AssetSoftwareLicenseAssignment, SoftwareLicense).join(
        SoftwareLicense, AssetSoftwareLicenseAssignment.software_license_id == SoftwareLicense.id
    ).filter(
        AssetSoftwareLicenseAssignment.asset_id == asset_id,
        SoftwareLicense.deleted_at.is_(None)
    ).order_by(SoftwareLicense.software_name).all()
    return [
        AssetLinkedLicense(
            software_license_id=lic.id,
            software_name=lic.software_name,
            software_version=lic.software_version,
            license_key=lic.license_key,
            license_type=lic.license_type,
            seats=lic.seats,
            expiry_date=lic.expiry_date,
            installation_date_on_asset=assignment.installation_date,
            assignment_notes=assignment.notes,
        )
        for assignment, lic in rows
    ]


@router.get("", response_model=List[SoftwareLicenseResponse])
async def get_software_licenses(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(SoftwareLicense).filter(SoftwareLicense.deleted_at.is_(None))
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            SoftwareLicense.software_name.ilike(pattern),
            SoftwareLicense.software_version.ilike(pattern),
            SoftwareLicense.license_key.ilike(pattern),
            SoftwareLicense.invoice_number.ilike(pattern)
        ))
    return query.order_by(SoftwareLicense.software_name).all()


@router.get("/{license_id}", response_model=SoftwareLicenseDetailResponse)
async def get_software_license(
    license_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return license_detail(get_active_license(db, license_id))


@router.post("", response_model=SoftwareLicenseDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_software_license(
    license_data: SoftwareLicenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    check_license_key_unique(db, license_data.license_key)
    check_license_references(db, license_data.supplier_company_id, license_data.assigned_to_user_id)
    assignments = build_assignments(db, license_data.assign_to_asset_ids)

    software_license = SoftwareLicense(**license_data.model_dump(exclude={"assign_to_asset_ids"}))
    software_license.assignments = assignments
    db.add(software_license)
    db.commit()
    return license_detail(get_active_license(db, software_license.id))


@router.put("/{license_id}", response_model=SoftwareLicenseDetailResponse)
async def update_software_license(
    license_id: int,
    license_data: SoftwareLicenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Partial update. Given assign_to_asset_ids replace all assignments."""
    software_license = get_active_license(db, license_id)

    update_data = license_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data to update"
        )
    check_license_key_unique(db, update_data.get("license_key"), exclude_id=license_id)
    check_license_references(db, update_data.get("supplier_company_id"), update_data.get("assigned_to_user_id"))

    asset_ids = update_data.pop("assign_to_asset_ids", None)
    if asset_ids is not None:
        software_license.assignments = build_assignments(db, asset_ids)

    for field, value in update_data.items():
        setattr(software_license, field, value)

    db.commit()
    db.expire_all()
    return license_detail(get_active_license(db, license_id))


@router.delete("/{license_id}")
async def delete_software_license(
    license_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    software_license = get_active_license(db, license_id)
    software_license.deleted_at = datetime.now(timezone.utc)
    db.commit()
    return {"message": "Software license deleted"}


@router.get("/{license_id}/documents", response_model=List[DocumentResponse])
async def get_software_license_documents(
    license_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    get_active_license(db, license_id)
    return list_entity_documents(db, ENTITY_SOFTWARE_LICENSE, license_id)
