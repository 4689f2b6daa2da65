"""Dashboard service for the admin overview counters."""

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tenant import Tenant, TenantStatus
from app.models.visitor import ApprovalStatus, Visitor
from app.models.visitor_log import VisitorLog


async def get_dashboard_stats(db: AsyncSession, today: Optional[date] = None) -> dict:
    """Get tenant, approval and presence counters for the admin dashboard."""
    today = today or datetime.now().date()
    day_start = datetime.combine(today, time.min)
    day_end = day_start + timedelta(days=1)

    active_tenants = await db.scalar(
        select(func.count(Tenant.tenant_id)).where(Tenant.status == TenantStatus.ACTIVE)
    )
    pending_approvals = await db.scalar(
        select(func.count(Visitor.visitor_id)).where(Visitor.approval_status == ApprovalStatus.PENDING)
    )

    # Single query over the log: currently inside, and checked in today
    log_counts = (
        await db.execute(
            select(
                func.count(VisitorLog.log_id)
                .filter(VisitorLog.check_in_time.is_not(None), VisitorLog.check_out_time.is_(None))
                .label("active"),
                func.count(VisitorLog.log_id)
                .filter(VisitorLog.check_in_time >= day_start, VisitorLog.check_in_time < day_end)
                .label("today"),
            )
        )
    ).one()

    return {
        "active_tenants": active_tenants or 0,
        "pending_approvals": pending_approvals or 0,
        "active_visitors": log_counts.active or 0,
        "today_visitors": log_counts.today or 0,
    }
