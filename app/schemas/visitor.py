"""
Visitor Schemas

Pydantic models for visitor registration, tenant edits, approval decisions
and responses.

Required text fields are optional at the schema level so the visitor
workflow can reject missing or blank values with a ``MissingField``
validation error naming the field.
"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.visitor import ApprovalStatus
from app.schemas.visitor_log import VisitorLogResponse


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class VisitorCreate(BaseModel):
    """Schema for a tenant registering a visitor"""

    full_name: Optional[str] = Field(None, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=30)
    purpose: Optional[str] = None
    expected_date: Optional[date] = None
    expected_time: Optional[time] = None

    @field_validator("expected_date", "expected_time", mode="before")
    @classmethod
    def empty_string_is_missing(cls, v):
        """Forms submit '' for untouched date/time inputs"""
        return _blank_to_none(v)


class AdminVisitorCreate(VisitorCreate):
    """Schema for registering a visitor on a tenant's behalf"""

    tenant_id: Optional[int] = Field(None, gt=0, description="Required for staff; ignored for tenants.")


class VisitorUpdate(BaseModel):
    """Schema for a tenant editing a Pending visitor request"""

    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=30)
    purpose: Optional[str] = Field(None, min_length=1)
    expected_date: Optional[date] = None
    expected_time: Optional[time] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("expected_date", "expected_time", mode="before")
    @classmethod
    def empty_string_is_missing(cls, v):
        return _blank_to_none(v)


class VisitorStatusUpdate(BaseModel):
    approval_status: ApprovalStatus
    reason: Optional[str] = Field(None, max_length=500, description="Optional denial reason.")


class VisitorDecision(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class VisitorResponse(BaseModel):
    visitor_id: int
    tenant_id: int
    full_name: str
    contact_number: Optional[str] = None
    purpose: str
    expected_date: date
    expected_time: Optional[time] = None
    approval_status: ApprovalStatus
    denial_reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VisitorDetailResponse(VisitorResponse):
    tenant_name: str = "Unknown"
    tenant_room_number: str = "N/A"
    tenant_contact: str = "N/A"
    log: Optional[VisitorLogResponse] = None
