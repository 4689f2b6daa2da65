"""
Tenant Routes

Admin management of tenant records. Any authenticated caller may read a
single tenant.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, get_current_identity, require_admin
from app.database import get_db
from app.schemas.tenant import TenantCreate, TenantResponse, TenantUpdate
from app.services.tenant_service import TenantService, serialize_tenant

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tenants"])


@router.get("", response_model=list[TenantResponse])
async def list_tenants(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    tenants = await TenantService(db).list_tenants()
    return [serialize_tenant(tenant) for tenant in tenants]


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    tenant = await TenantService(db).get_tenant(tenant_id)
    return serialize_tenant(tenant)


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    data: TenantCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    tenant = await TenantService(db).register_tenant(data)
    return serialize_tenant(tenant)


@router.put("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: int,
    data: TenantUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    """Patch profile fields; a status change adjusts room occupancy."""
    tenant = await TenantService(db).update_tenant_fields(tenant_id, data)
    return serialize_tenant(tenant)


@router.delete("/{tenant_id}")
async def delete_tenant(
    tenant_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    await TenantService(db).delete_tenant(tenant_id)
    logger.info(f"Tenant {tenant_id} deleted by '{identity.username}'")
    return {"message": "Tenant deleted successfully", "tenant_id": tenant_id}
