from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from uam.database import get_db
from uam.models.user import User
from uam.models.asset import Asset
from uam.models.company import Company
from uam.models.location import Location
from uam.models.section import Section
from uam.models.software_license import SoftwareLicense
from uam.schemas.dashboard import SummaryStats
from uam.auth.jwt import get_current_user

router = APIRouter()


@router.get("/summary-stats", response_model=SummaryStats)
async def get_summary_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Counts of active records for the dashboard tiles."""
    return SummaryStats(
        users=db.query(User).filter(User.deleted_at.is_(None)).count(),
        assets=db.query(Asset).filter(Asset.deleted_at.is_(None)).count(),
        sections=db.query(Section).filter(Section.deleted_at.is_(None)).count(),
        companies=db.query(Company).count(),
        locations=db.query(Location).count(),
        software_licenses=db.query(SoftwareLicense).filter(SoftwareLicense.deleted_at.is_(None)).count(),
    )
