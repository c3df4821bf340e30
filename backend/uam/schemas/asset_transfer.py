from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date, datetime, timezone
import enum


class MovementKind(str, enum.Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    DISPOSAL = "disposal"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def normalize_timestamp(value: datetime) -> datetime:
    """Canonical form for stored timestamps: naive UTC, whole seconds."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


class AssetMoveRequest(BaseModel):
    """One movement of one asset. All fields are required for every kind."""
    target_section_name: str = Field(min_length=1)
    target_location_name: str = Field(min_length=1)
    movement_kind: MovementKind
    authorizing_user_national_id: str = Field(min_length=1)
    receiving_user_national_id: str = Field(min_length=1)
    caller_section_name: str = Field(min_length=1)
    transfer_date: datetime
    received_date: datetime

    @field_validator("transfer_date", "received_date")
    @classmethod
    def canonical_timestamp(cls, value: datetime) -> datetime:
        return normalize_timestamp(value)


class AssetMoveResponse(BaseModel):
    message: str
    transfer_id: int
    asset_id: int


class AssetMovementResponse(BaseModel):
    id: int
    asset_id: int
    transfer_date: datetime
    from_section_id: Optional[int]
    from_section_name: Optional[str] = None
    from_location_id: Optional[int]
    from_location_name: Optional[str] = None
    to_section_id: Optional[int]
    to_section_name: Optional[str] = None
    to_location_id: Optional[int]
    to_location_name: Optional[str] = None
    authorized_by_user_id: int
    authorized_by_user_name: Optional[str] = None
    authorized_by_user_national_id: Optional[str] = None
    received_by_user_id: Optional[int]
    received_by_user_name: Optional[str] = None
    received_by_user_national_id: Optional[str] = None
    received_by_user_section_name: Optional[str] = None
    received_date: Optional[datetime]
    notes: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class MovementReportFilters(BaseModel):
    """Filters of the movement report; date ranges are inclusive."""
    asset_id: Optional[int] = None
    transfer_from: Optional[date] = None
    transfer_to: Optional[date] = None
    received_from: Optional[date] = None
    received_to: Optional[date] = None
    from_section_name: Optional[str] = None
    from_location_name: Optional[str] = None
    to_section_name: Optional[str] = None
    to_location_name: Optional[str] = None
    authorized_by_user_name: Optional[str] = None  # matches "first last"
    received_by_user_name: Optional[str] = None
    notes: Optional[str] = None
