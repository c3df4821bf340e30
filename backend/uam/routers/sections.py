from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User
from uam.models.section import Section
from uam.schemas.section import SectionCreate, SectionUpdate, SectionResponse, SubsectionResponse
from uam.schemas.user import UserSimple
from uam.auth.jwt import get_current_user

router = APIRouter()


def get_active_section(db: Session, section_id: int) -> Section:
    section = db.query(Section).filter(
        Section.id == section_id,
        Section.deleted_at.is_(None)
    ).first()
    if not section:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Section not found"
        )
    return section


def check_section_unique(db: Session, name: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    """409 if another active section already uses the name or email."""
    for column, value, label in ((Section.name, name, "name"), (Section.email, email, "email")):
        if value is None:
            continue
        query = db.query(Section).filter(column == value, Section.deleted_at.is_(None))
        if exclude_id:
            query = query.filter(Section.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A section with this {label} already exists"
            )


def check_parent_section(db: Session, parent_section_id: Optional[int]):
    if parent_section_id is None:
        return
    parent = db.query(Section).filter(
        Section.id == parent_section_id,
        Section.deleted_at.is_(None)
    ).first()
    if not parent:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Parent section does not exist or is inactive"
        )


def check_no_cycle(db: Session, section_id: int, parent_section_id: Optional[int]):
    """400 if the new parent is the section itself or one of its descendants."""
    seen = set()
    current_id = parent_section_id
    while current_id is not None and current_id not in seen:
        if current_id == section_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A section cannot be placed under itself or one of its subsections"
            )
        seen.add(current_id)
        current_id = db.query(Section.parent_section_id).filter(Section.id == current_id).scalar()


@router.get("", response_model=List[SectionResponse])
async def get_sections(
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Active sections, optionally filtered by name."""
    query = db.query(Section).filter(Section.deleted_at.is_(None))
    if name:
        query = query.filter(Section.name.ilike(f"%{name}%"))
    return query.order_by(Section.name).all()


@router.get("/{section_id}", response_model=SectionResponse)
async def get_section(
    section_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_active_section(db, section_id)


@router.post("", response_model=SectionResponse, status_code=status.HTTP_201_CREATED)
async def create_section(
    section_data: SectionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    check_section_unique(db, section_data.name, section_data.email)
    check_parent_section(db, section_data.parent_section_id)

    section = Section(**section_data.model_dump())
    db.add(section)
    db.commit()
    db.refresh(section)
    return section


@router.put("/{section_id}", response_model=SectionResponse)
async def update_section(
    section_id: int,
    section_data: SectionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Partial update - only sent fields are changed."""
    section = get_active_section(db, section_id)

    update_data = section_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data to update"
        )

    check_no_cycle(db, section_id, update_data.get("parent_section_id"))
    check_section_unique(db, update_data.get("name"), update_data.get("email"), exclude_id=section_id)
    check_parent_section(db, update_data.get("parent_section_id"))

    for field, value in update_data.items():
        setattr(section, field, value)

    db.commit()
    db.refresh(section)
    return section


@router.delete("/{section_id}")
async def delete_section(
    section_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Soft delete. The name gets a suffix so it can be reused."""
    section = get_active_section(db, section_id)

    active_children = db.query(Section).filter(
        Section.parent_section_id == section_id,
        Section.deleted_at.is_(None)
    ).count()
    if active_children:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The section has active subsections and cannot be deleted"
        )

    now = datetime.now(timezone.utc)
    section.deleted_at = now
    section.name = f"{section.name}_deleted_{int(now.timestamp())}"[:100]
    db.commit()
    return {"message": "Section deleted"}


@router.get("/{section_id}/subsections", response_model=List[SubsectionResponse])
async def get_subsections(
    section_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    get_active_section(db, section_id)
    return db.query(Section).filter(
        Section.parent_section_id == section_id,
        Section.deleted_at.is_(None)
    ).order_by(Section.name).all()


@router.get("/{section_id}/users", response_model=List[UserSimple])
async def get_section_users(
    section_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    get_active_section(db, section_id)
    return db.query(User).filter(
        User.section_id == section_id,
        User.deleted_at.is_(None)
    ).order_by(User.last_name, User.first_name).all()
