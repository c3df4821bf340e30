from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class LocationBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)


class LocationCreate(LocationBase):
    section_id: int = Field(gt=0)


class LocationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    section_id: Optional[int] = Field(default=None, gt=0)

    @field_validator("name", "section_id")
    @classmethod
    def required_not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


class LocationResponse(LocationBase):
    id: int
    section_id: Optional[int]
    section_name: Optional[str] = None
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
