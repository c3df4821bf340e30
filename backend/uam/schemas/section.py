from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


class SectionBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    management_level: Optional[int] = Field(default=None, ge=1)
    email: Optional[EmailStr] = None
    parent_section_id: Optional[int] = Field(default=None, gt=0)


class SectionCreate(SectionBase):
    pass


class SectionUpdate(BaseModel):
    """Partial update - only fields that are sent are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    management_level: Optional[int] = Field(default=None, ge=1)
    email: Optional[EmailStr] = None
    parent_section_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value


class SectionResponse(BaseModel):
    id: int
    name: str
    management_level: Optional[int]
    email: Optional[str]
    parent_section_id: Optional[int]
    parent_section_name: Optional[str] = None
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class SubsectionResponse(BaseModel):
    id: int
    name: str
    management_level: Optional[int]
    email: Optional[str]

    class Config:
        from_attributes = True
