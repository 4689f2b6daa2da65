"""
Visitor Log Routes

Help desk check-in/check-out and presence queries. Admins hold the help
desk capability as well.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Identity, require_helpdesk
from app.database import get_db
from app.schemas.visitor_log import CheckInRequest, CheckOutRequest, VisitorLogDetailResponse
from app.services.visitor_log_service import VisitorLogService, serialize_log

router = APIRouter(tags=["Visitor Logs"])


@router.get("", response_model=list[VisitorLogDetailResponse])
async def list_logs(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_helpdesk),
):
    return [serialize_log(log) for log in await VisitorLogService(db).list_all()]


@router.get("/active", response_model=list[VisitorLogDetailResponse])
async def list_active_visitors(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_helpdesk),
):
    """Visitors currently inside the building."""
    return [serialize_log(log) for log in await VisitorLogService(db).list_active()]


@router.get("/visitor/{visitor_id}", response_model=list[VisitorLogDetailResponse])
async def list_logs_for_visitor(
    visitor_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_helpdesk),
):
    return [serialize_log(log) for log in await VisitorLogService(db).list_by_visitor(visitor_id)]


@router.get("/{log_id}", response_model=VisitorLogDetailResponse)
async def get_log(
    log_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_helpdesk),
):
    return serialize_log(await VisitorLogService(db).get_log(log_id))


@router.post("/check-in", response_model=VisitorLogDetailResponse, status_code=status.HTTP_201_CREATED)
async def check_in(
    data: CheckInRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_helpdesk),
):
    processed_by = data.processed_by if data.processed_by is not None else identity.user_id
    log = await VisitorLogService(db).check_in(data.visitor_id, processed_by=processed_by, id_left=data.id_left)
    return serialize_log(log)


@router.post("/check-out", response_model=VisitorLogDetailResponse)
async def check_out(
    data: CheckOutRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_helpdesk),
):
    return serialize_log(await VisitorLogService(db).check_out(data.visitor_id))
