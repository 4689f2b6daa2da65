"""
Visitor Routes

Visitor reads for staff and tenants, registration on a tenant's behalf,
and admin status changes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, get_current_identity, require_admin
from app.constants.roles import RoleName
from app.database import get_db
from app.exceptions import AuthorizationError, ValidationError
from app.models.visitor import ApprovalStatus
from app.schemas.visitor import AdminVisitorCreate, VisitorDetailResponse, VisitorStatusUpdate
from app.services.visitor_service import VisitorService, serialize_visitor

router = APIRouter(tags=["Visitors"])


def _is_staff(identity: Identity) -> bool:
    return identity.has_role(RoleName.HELPDESK)


def _ensure_can_view(identity: Identity, tenant_id: int) -> None:
    if _is_staff(identity):
        return
    if identity.role == RoleName.TENANT and identity.user_id == tenant_id:
        return
    raise AuthorizationError("You can only view your own visitors")


@router.get("", response_model=list[VisitorDetailResponse])
async def list_visitors(
    approval_status: Optional[ApprovalStatus] = None,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Staff see every visitor; a tenant sees only their own."""
    tenant_id = None if _is_staff(identity) else identity.user_id
    visitors = await VisitorService(db).list_visitors(tenant_id=tenant_id, status=approval_status)
    return [serialize_visitor(visitor, include_details=True) for visitor in visitors]


@router.get("/tenant/{tenant_id}", response_model=list[VisitorDetailResponse])
async def list_visitors_for_tenant(
    tenant_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    _ensure_can_view(identity, tenant_id)
    visitors = await VisitorService(db).list_visitors(tenant_id=tenant_id)
    return [serialize_visitor(visitor, include_details=True) for visitor in visitors]


@router.get("/{visitor_id}", response_model=VisitorDetailResponse)
async def get_visitor(
    visitor_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    service = VisitorService(db)
    visitor = await service.get_visitor(visitor_id)
    _ensure_can_view(identity, visitor.tenant_id)
    return serialize_visitor(visitor, include_details=True)


@router.post("", response_model=VisitorDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_visitor(
    data: AdminVisitorCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """
    Register a visitor.

    A tenant always registers for themself; an admin must name the tenant.
    """
    if identity.role == RoleName.TENANT:
        tenant_id = identity.user_id
    elif identity.has_role(RoleName.ADMIN):
        if data.tenant_id is None:
            raise ValidationError(
                "Missing required field: tenant_id",
                reason=ValidationError.MISSING_FIELD,
                field="tenant_id",
            )
        tenant_id = data.tenant_id
    else:
        raise AuthorizationError("Access denied. Tenant or Admin privileges required.")

    visitor = await VisitorService(db).submit_visitor(
        tenant_id=tenant_id,
        full_name=data.full_name,
        contact_number=data.contact_number,
        purpose=data.purpose,
        expected_date=data.expected_date,
        expected_time=data.expected_time,
    )
    return serialize_visitor(visitor, include_details=True)


@router.put("/{visitor_id}/status", response_model=VisitorDetailResponse)
async def update_visitor_status(
    visitor_id: int,
    data: VisitorStatusUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    visitor = await VisitorService(db).set_status(visitor_id, identity, data.approval_status, data.reason)
    return serialize_visitor(visitor, include_details=True)


@router.delete("/{visitor_id}")
async def delete_visitor(
    visitor_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    await VisitorService(db).admin_delete_visitor(visitor_id)
    return {"message": "Visitor deleted successfully", "visitor_id": visitor_id}
