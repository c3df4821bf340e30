"""
Queries over the append-only asset transfer history.
"""
import re
from datetime import datetime, time
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, aliased, joinedload

from uam.models.asset_transfer import AssetTransfer
from uam.models.location import Location
from uam.models.section import Section
from uam.models.user import User
from uam.schemas.asset_transfer import MovementKind, MovementReportFilters

MOVEMENT_NOTE = re.compile(r"Movement type: (\w+)", re.IGNORECASE)


def movement_kind_from_notes(notes: Optional[str]) -> Optional[MovementKind]:
    """Reads the movement kind back from the note written at transfer time."""
    match = MOVEMENT_NOTE.search(notes or "")
    if not match:
        return None
    try:
        return MovementKind(match.group(1).lower())
    except ValueError:
        return None


def movements_query(db: Session):
    return db.query(AssetTransfer).options(
        joinedload(AssetTransfer.asset),
        joinedload(AssetTransfer.from_section),
        joinedload(AssetTransfer.from_location),
        joinedload(AssetTransfer.to_section),
        joinedload(AssetTransfer.to_location),
        joinedload(AssetTransfer.authorized_by),
        joinedload(AssetTransfer.received_by).joinedload(User.section),
    )


def get_asset_movements(db: Session, asset_id: int) -> List[AssetTransfer]:
    """History of one asset, newest first."""
    return movements_query(db).filter(
        AssetTransfer.asset_id == asset_id
    ).order_by(AssetTransfer.transfer_date.desc(), AssetTransfer.id.desc()).all()


def full_name(user):
    return func.coalesce(user.first_name, "") + " " + func.coalesce(user.last_name, "")


def search_movements(db: Session, filters: MovementReportFilters, ascending: bool = False) -> List[AssetTransfer]:
    """Movements across assets. Date ranges include both ends, name filters match substrings."""
    query = movements_query(db)

    if filters.asset_id:
        query = query.filter(AssetTransfer.asset_id == filters.asset_id)
    if filters.transfer_from:
        query = query.filter(AssetTransfer.transfer_date >= datetime.combine(filters.transfer_from, time.min))
    if filters.transfer_to:
        query = query.filter(AssetTransfer.transfer_date <= datetime.combine(filters.transfer_to, time.max))
    if filters.received_from:
        query = query.filter(AssetTransfer.received_date >= datetime.combine(filters.received_from, time.min))
    if filters.received_to:
        query = query.filter(AssetTransfer.received_date <= datetime.combine(filters.received_to, time.max))

    joined_names = (
        (filters.from_section_name, Section, AssetTransfer.from_section_id, lambda t: t.name),
        (filters.to_section_name, Section, AssetTransfer.to_section_id, lambda t: t.name),
        (filters.from_location_name, Location, AssetTransfer.from_location_id, lambda t: t.name),
        (filters.to_location_name, Location, AssetTransfer.to_location_id, lambda t: t.name),
        (filters.authorized_by_user_name, User, AssetTransfer.authorized_by_user_id, full_name),
        (filters.received_by_user_name, User, AssetTransfer.received_by_user_id, full_name),
    )
    for text, model, foreign_key, name_of in joined_names:
        if not text:
            continue
        target = aliased(model)
        query = query.join(target, foreign_key == target.id).filter(
            name_of(target).ilike(f"%{text}%")
        )

    if filters.notes:
        query = query.filter(AssetTransfer.notes.ilike(f"%{filters.notes}%"))

    if ascending:
        order = (AssetTransfer.transfer_date.asc(), AssetTransfer.id.asc())
    else:
        order = (AssetTransfer.transfer_date.desc(), AssetTransfer.id.desc())
    return query.order_by(*order).all()
