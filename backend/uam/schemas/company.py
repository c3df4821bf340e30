from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


class CompanyBase(BaseModel):
    tax_id: str = Field(min_length=1, max_length=50)
    legal_name: str = Field(min_length=1, max_length=100)
    trade_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(default=None, max_length=50)


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(BaseModel):
    tax_id: Optional[str] = Field(default=None, min_length=1, max_length=50)
    legal_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    trade_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(default=None, max_length=50)

    @field_validator("tax_id", "legal_name")
    @classmethod
    def required_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("field cannot be null")
        return value


class CompanyResponse(CompanyBase):
    id: int
    email: Optional[str] = None
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
