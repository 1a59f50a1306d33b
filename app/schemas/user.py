from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from enum import Enum

from app.models.user import UserRole


class RegistrationRoleEnum(str, Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"


class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    role: RegistrationRoleEnum = RegistrationRoleEnum.TENANT


class StaffCreate(UserBase):
    password: str = Field(..., min_length=6)
    specialization: str = Field(..., min_length=2, description="plumber, electrician, hvac, ...")


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    role: UserRole
    name: str
    email: str
    phone: Optional[str] = None
    specialization: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse
