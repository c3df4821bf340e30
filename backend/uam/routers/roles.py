from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User, Role
from uam.schemas.user import RoleResponse
from uam.auth.jwt import get_current_user

router = APIRouter()


@router.get("", response_model=List[RoleResponse])
async def get_roles(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return db.query(Role).filter(Role.deleted_at.is_(None)).order_by(Role.name).all()
