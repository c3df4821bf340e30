from pydantic import BaseModel

from uam.models.asset import AssetStatus


class SummaryStats(BaseModel):
    users: int
    assets: int
    sections: int
    companies: int
    locations: int
    software_licenses: int


class AssetsByStatus(BaseModel):
    status: AssetStatus
    count: int


class UsersBySection(BaseModel):
    section_id: int
    section_name: str
    user_count: int
