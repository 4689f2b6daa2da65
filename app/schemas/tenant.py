"""
Tenant Schemas

Pydantic models for tenant registration, patching and responses.

``TenantUpdate`` is a closed set of optional fields: the identity fields
(tenant_id, username, password) and the room assignment have no place in it.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.tenant import TenantStatus


class TenantCreate(BaseModel):
    """Schema for registering a tenant into a room"""

    username: str = Field(..., min_length=3, max_length=50, description="Login name, unique across all accounts.")
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    contact_number: str = Field(..., min_length=1, max_length=30)
    room_id: int = Field(..., gt=0)
    emergency_contact_name: Optional[str] = Field(None, max_length=100)
    emergency_contact_number: Optional[str] = Field(None, max_length=30)
    move_in_date: Optional[date] = Field(None, description="Defaults to today.")


class TenantUpdate(BaseModel):
    """Schema for patching tenant profile fields and status"""

    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    contact_number: Optional[str] = Field(None, min_length=1, max_length=30)
    email: Optional[EmailStr] = None
    move_in_date: Optional[date] = None
    emergency_contact_name: Optional[str] = Field(None, max_length=100)
    emergency_contact_number: Optional[str] = Field(None, max_length=30)
    status: Optional[TenantStatus] = None

    model_config = ConfigDict(extra="forbid")


class TenantResponse(BaseModel):
    tenant_id: int
    room_id: Optional[int] = None
    username: str
    full_name: str
    contact_number: str
    email: str
    emergency_contact_name: Optional[str] = None
    emergency_contact_number: Optional[str] = None
    move_in_date: date
    status: TenantStatus

    # Room join
    room_number: Optional[str] = None
    room_building: Optional[str] = None
    room_capacity: Optional[int] = None
    room_current_occupants: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
