from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User
from uam.models.asset import Asset
from uam.models.company import Company
from uam.models.software_license import SoftwareLicense
from uam.schemas.company import CompanyCreate, CompanyUpdate, CompanyResponse
from uam.auth.jwt import get_current_user

router = APIRouter()


def get_company_or_404(db: Session, company_id: int) -> Company:
    company = db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company not found"
        )
    return company


def check_company_unique(db: Session, tax_id: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    conditions = []
    if tax_id:
        conditions.append(Company.tax_id == tax_id)
    if email:
        conditions.append(Company.email == email)
    if not conditions:
        return
    query = db.query(Company).filter(or_(*conditions))
    if exclude_id:
        query = query.filter(Company.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The tax ID or email already exists for another company"
        )


@router.get("", response_model=List[CompanyResponse])
async def get_companies(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(Company)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Company.legal_name.ilike(pattern),
            Company.trade_name.ilike(pattern),
            Company.tax_id.ilike(pattern),
            Company.email.ilike(pattern)
        ))
    return query.order_by(Company.legal_name).all()


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_company_or_404(db, company_id)


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    check_company_unique(db, company_data.tax_id, company_data.email)

    company = Company(**company_data.model_dump())
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    company_data: CompanyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    company = get_company_or_404(db, company_id)

    update_data = company_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data to update"
        )
    check_company_unique(db, update_data.get("tax_id"), update_data.get("email"), exclude_id=company_id)

    for field, value in update_data.items():
        setattr(company, field, value)

    db.commit()
    db.refresh(company)
    return company


@router.delete("/{company_id}")
async def delete_company(
    company_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Hard delete. Assets and licenses keep existing without a supplier."""
    company = get_company_or_404(db, company_id)

    db.query(Asset).filter(Asset.supplier_company_id == company_id).update(
        {Asset.supplier_company_id: None}, synchronize_session=False
    )
    db.query(SoftwareLicense).filter(SoftwareLicense.supplier_company_id == company_id).update(
        {SoftwareLicense.supplier_company_id: None}, synchronize_session=False
    )
    db.delete(company)
    db.commit()
    return {"message": "Company deleted"}
