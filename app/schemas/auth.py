"""
Authentication Schemas

Request and response models for login and staff account registration.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.constants.roles import StaffRole


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class LogoutResponse(BaseModel):
    message: str = "Logout successful"
    success: bool = True


class AdminCreate(BaseModel):
    """Schema for registering a staff (admin or help desk) account"""

    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    contact_number: Optional[str] = Field(None, max_length=30)
    role: StaffRole = StaffRole.ADMIN


class AdminResponse(BaseModel):
    admin_id: int
    username: str
    full_name: str
    email: str
    contact_number: Optional[str] = None
    employed_date: Optional[date] = None
    role: StaffRole

    model_config = ConfigDict(from_attributes=True)
