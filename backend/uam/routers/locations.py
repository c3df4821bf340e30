from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User
from uam.models.asset import Asset
from uam.models.asset_transfer import AssetTransfer
from uam.models.location import Location
from uam.models.section import Section
from uam.schemas.location import LocationCreate, LocationUpdate, LocationResponse
from uam.auth.jwt import get_current_user

router = APIRouter()


def get_location_or_404(db: Session, location_id: int) -> Location:
    location = db.query(Location).filter(Location.id == location_id).first()
    if not location:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Location not found"
        )
    return location


def check_location_section(db: Session, section_id: int):
    section = db.query(Section).filter(
        Section.id == section_id,
        Section.deleted_at.is_(None)
    ).first()
    if not section:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Section does not exist or is inactive"
        )


def check_location_unique(db: Session, name: str, section_id: int, exclude_id: Optional[int] = None):
    """Location names are unique within a section."""
    query = db.query(Location).filter(
        Location.name == name,
        Location.section_id == section_id
    )
    if exclude_id:
        query = query.filter(Location.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A location with this name already exists in the section"
        )


@router.get("", response_model=List[LocationResponse])
async def get_locations(
    search: Optional[str] = None,
    section_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(Location)
    if section_id is not None:
        query = query.filter(Location.section_id == section_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Location.name.ilike(pattern),
            Location.description.ilike(pattern)
        ))
    return query.order_by(Location.name).all()


@router.get("/{location_id}", response_model=LocationResponse)
async def get_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_location_or_404(db, location_id)


@router.post("", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_location(
    location_data: LocationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    check_location_section(db, location_data.section_id)
    check_location_unique(db, location_data.name, location_data.section_id)

    location = Location(**location_data.model_dump())
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


@router.put("/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: int,
    location_data: LocationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    location = get_location_or_404(db, location_id)

    update_data = location_data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data to update"
        )
    if update_data.get("section_id") is not None:
        check_location_section(db, update_data["section_id"])

    new_name = update_data.get("name", location.name)
    new_section_id = update_data.get("section_id", location.section_id)
    check_location_unique(db, new_name, new_section_id, exclude_id=location_id)

    for field, value in update_data.items():
        setattr(location, field, value)

    db.commit()
    db.refresh(location)
    return location


@router.delete("/{location_id}")
async def delete_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Hard delete. Refused while assets or movements refer to the location."""
    location = get_location_or_404(db, location_id)

    in_use = db.query(Asset.id).filter(Asset.current_location_id == location_id).first()
    in_history = db.query(AssetTransfer.id).filter(or_(
        AssetTransfer.from_location_id == location_id,
        AssetTransfer.to_location_id == location_id
    )).first()
    if in_use or in_history:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The location cannot be deleted because it is referenced"
        )

    db.delete(location)
    db.commit()
    return {"message": "Location deleted"}
