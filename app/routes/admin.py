"""
Admin Routes

Approval decisions, tenant registration shortcut, room listing and the
dashboard counters.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, require_admin
from app.database import get_db
from app.schemas.dashboard import DashboardStats
from app.schemas.room import RoomResponse
from app.schemas.tenant import TenantCreate, TenantResponse
from app.schemas.visitor import VisitorDecision, VisitorDetailResponse
from app.services.dashboard_service import get_dashboard_stats
from app.services.tenant_service import TenantService, serialize_tenant
from app.services.visitor_service import VisitorService, serialize_visitor

router = APIRouter(tags=["Admin"])


@router.get("/dashboard-stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    return await get_dashboard_stats(db)


@router.get("/rooms", response_model=list[RoomResponse])
async def list_rooms(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    return await TenantService(db).list_rooms()


@router.put("/approve-visitor/{visitor_id}", response_model=VisitorDetailResponse)
async def approve_visitor(
    visitor_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    visitor = await VisitorService(db).approve_visitor(visitor_id, identity)
    return serialize_visitor(visitor, include_details=True)


@router.put("/reject-visitor/{visitor_id}", response_model=VisitorDetailResponse)
async def reject_visitor(
    visitor_id: int,
    decision: Optional[VisitorDecision] = Body(None),
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    reason = decision.reason if decision else None
    visitor = await VisitorService(db).deny_visitor(visitor_id, identity, reason)
    return serialize_visitor(visitor, include_details=True)


@router.post("/create-tenant", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    data: TenantCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    tenant = await TenantService(db).register_tenant(data)
    return serialize_tenant(tenant)
