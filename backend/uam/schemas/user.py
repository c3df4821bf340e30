from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime

from uam.models.user import UserStatus


class RoleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class UserBase(BaseModel):
    email: EmailStr
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    national_id: Optional[str] = Field(default=None, max_length=20)
    status: UserStatus = UserStatus.ACTIVE
    birth_date: Optional[date] = None
    section_id: Optional[int] = Field(default=None, gt=0)
    avatar_url: Optional[str] = Field(default=None, max_length=255)


class UserCreate(UserBase):
    password: str = Field(min_length=8)
    role_ids: List[int] = []


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    national_id: Optional[str] = Field(default=None, max_length=20)
    status: Optional[UserStatus] = None
    birth_date: Optional[date] = None
    section_id: Optional[int] = Field(default=None, gt=0)
    avatar_url: Optional[str] = Field(default=None, max_length=255)
    role_ids: Optional[List[int]] = None  # given -> replaces the role set

    @field_validator("email", "status")
    @classmethod
    def required_not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    full_name: Optional[str] = None
    national_id: Optional[str]
    status: UserStatus
    birth_date: Optional[date]
    section_id: Optional[int]
    section_name: Optional[str] = None
    avatar_url: Optional[str]
    roles: List[RoleResponse] = []
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class UserSimple(BaseModel):
    """Short user view, e.g. for the members of a section."""
    id: int
    first_name: Optional[str]
    last_name: Optional[str]
    email: str
    avatar_url: Optional[str]

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=1)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("The new passwords do not match")
        return self
