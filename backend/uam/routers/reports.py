from datetime import date
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User
from uam.schemas.asset_transfer import AssetMovementResponse, MovementReportFilters
from uam.auth.jwt import get_current_user
from uam.services.movement_history import search_movements

router = APIRouter()


def movement_filters(
    transfer_from: Optional[date] = None,
    transfer_to: Optional[date] = None,
    received_from: Optional[date] = None,
    received_to: Optional[date] = None,
    from_section_name: Optional[str] = None,
    from_location_name: Optional[str] = None,
    to_section_name: Optional[str] = None,
    to_location_name: Optional[str] = None,
    authorized_by_user_name: Optional[str] = None,
    received_by_user_name: Optional[str] = None,
    notes: Optional[str] = None,
) -> MovementReportFilters:
    """Query parameters shared by the movement report and the movement PDF."""
    return MovementReportFilters(
        transfer_from=transfer_from,
        transfer_to=transfer_to,
        received_from=received_from,
        received_to=received_to,
        from_section_name=from_section_name,
        from_location_name=from_location_name,
        to_section_name=to_section_name,
        to_location_name=to_location_name,
        authorized_by_user_name=authorized_by_user_name,
        received_by_user_name=received_by_user_name,
        notes=notes,
    )


@router.get("/asset-movements", response_model=List[AssetMovementResponse])
async def get_asset_movements_report(
    asset_id: Optional[int] = None,
    order: Literal["asc", "desc"] = "desc",
    filters: MovementReportFilters = Depends(movement_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Movements across all assets, newest first unless order=asc."""
    filters.asset_id = asset_id
    return search_movements(db, filters, ascending=order == "asc")
