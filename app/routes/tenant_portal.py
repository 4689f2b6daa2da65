"""
Tenant Portal Routes

Self-service endpoints scoped to the calling tenant: profile, visitor
registration, and editing or withdrawing Pending requests.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, require_tenant
from app.database import get_db
from app.schemas.tenant import TenantResponse
from app.schemas.visitor import VisitorCreate, VisitorDetailResponse, VisitorUpdate
from app.services.tenant_service import TenantService, serialize_tenant
from app.services.visitor_service import VisitorService, serialize_visitor

router = APIRouter(tags=["Tenant Portal"])


@router.get("/profile", response_model=TenantResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_tenant),
):
    tenant = await TenantService(db).get_tenant(identity.user_id)
    return serialize_tenant(tenant)


@router.post("/register-visitor", response_model=VisitorDetailResponse, status_code=status.HTTP_201_CREATED)
async def register_visitor(
    data: VisitorCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_tenant),
):
    visitor = await VisitorService(db).submit_visitor(
        tenant_id=identity.user_id,
        full_name=data.full_name,
        contact_number=data.contact_number,
        purpose=data.purpose,
        expected_date=data.expected_date,
        expected_time=data.expected_time,
    )
    return serialize_visitor(visitor, include_details=True)


@router.get("/visitors", response_model=list[VisitorDetailResponse])
async def list_my_visitors(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_tenant),
):
    visitors = await VisitorService(db).list_visitors(tenant_id=identity.user_id)
    return [serialize_visitor(visitor, include_details=True) for visitor in visitors]


@router.put("/visitors/{visitor_id}", response_model=VisitorDetailResponse)
async def update_my_visitor(
    visitor_id: int,
    data: VisitorUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_tenant),
):
    visitor = await VisitorService(db).edit_visitor(visitor_id, identity.user_id, data)
    return serialize_visitor(visitor, include_details=True)


@router.delete("/visitors/{visitor_id}")
async def delete_my_visitor(
    visitor_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_tenant),
):
    await VisitorService(db).delete_visitor(visitor_id, identity.user_id)
    return {"message": "Visitor deleted successfully", "visitor_id": visitor_id}
