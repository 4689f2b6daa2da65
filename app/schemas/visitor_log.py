from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.visitor import ApprovalStatus


class CheckInRequest(BaseModel):
    visitor_id: int = Field(..., gt=0)
    processed_by: Optional[int] = Field(None, description="Staff id; defaults to the caller.")
    id_left: Optional[str] = Field(None, max_length=100, description="ID document left at the desk.")


class CheckOutRequest(BaseModel):
    visitor_id: int = Field(..., gt=0)


class VisitorLogResponse(BaseModel):
    log_id: int
    visitor_id: int
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    processed_by: Optional[int] = None
    id_left: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VisitorLogDetailResponse(VisitorLogResponse):
    visitor_name: Optional[str] = None
    purpose: Optional[str] = None
    visit_date: Optional[date] = None
    approval_status: Optional[ApprovalStatus] = None
    tenant_name: Optional[str] = None
    room_number: Optional[str] = None
    processed_by_name: Optional[str] = None
