from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User
from uam.models.asset import Asset
from uam.models.section import Section
from uam.schemas.dashboard import AssetsByStatus, UsersBySection
from uam.auth.jwt import get_current_user

router = APIRouter()


@router.get("/assets-by-status", response_model=List[AssetsByStatus])
async def get_assets_by_status(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    count = func.count(Asset.id)
    rows = db.query(Asset.status, count).filter(
        Asset.deleted_at.is_(None)
    ).group_by(Asset.status).order_by(count.desc()).all()
    return [AssetsByStatus(status=row[0], count=row[1]) for row in rows]


@router.get("/users-by-section", response_model=List[UsersBySection])
async def get_users_by_section(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Active users per active section. Sections without users are left out."""
    count = func.count(User.id)
    rows = db.query(Section.id, Section.name, count).join(
        User, User.section_id == Section.id
    ).filter(
        User.deleted_at.is_(None),
        Section.deleted_at.is_(None)
    ).group_by(Section.id, Section.name).order_by(count.desc(), Section.name).all()
    return [UsersBySection(section_id=row[0], section_name=row[1], user_count=row[2]) for row in rows]
