"""
Visitor Service

Registration and approval workflow for visitor requests.

A request is born Pending and is decided exactly once:

    Pending -> Approved
    Pending -> Denied

Repeating the decision already taken is a no-op; reversing it is refused.
Tenants may edit or withdraw their own requests only while Pending.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.auth import Identity
from app.config import settings
from app.constants.roles import RoleName
from app.exceptions import (
    AuthorizationError,
    InvalidStateError,
    TenantNotFoundError,
    ValidationError,
    VisitorNotFoundError,
)
from app.models.tenant import Tenant
from app.models.visitor import ApprovalStatus, Visitor
from app.models.visitor_log import VisitorLog
from app.schemas.visitor import VisitorUpdate
from app.utils.visitor_views import select_relevant_log

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("full_name", "purpose", "expected_date")


def serialize_visitor(visitor: Visitor, include_details: bool = False) -> dict:
    data = {
        "visitor_id": visitor.visitor_id,
        "tenant_id": visitor.tenant_id,
        "full_name": visitor.full_name,
        "contact_number": visitor.contact_number,
        "purpose": visitor.purpose,
        "expected_date": visitor.expected_date,
        "expected_time": visitor.expected_time,
        "approval_status": visitor.approval_status,
        "denial_reason": visitor.denial_reason,
        "created_at": visitor.created_at,
    }
    if not include_details:
        return data

    tenant = visitor.tenant
    room = tenant.room if tenant else None
    data.update(
        {
            "tenant_name": tenant.full_name if tenant else "Unknown",
            "tenant_room_number": room.room_number if room else "N/A",
            "tenant_contact": (tenant.contact_number if tenant else None) or "N/A",
            "log": _log_summary(select_relevant_log(visitor.logs)),
        }
    )
    return data


def _log_summary(log: Optional[VisitorLog]) -> Optional[dict]:
    if log is None:
        return None
    return {
        "log_id": log.log_id,
        "visitor_id": log.visitor_id,
        "check_in_time": log.check_in_time,
        "check_out_time": log.check_out_time,
        "processed_by": log.processed_by,
        "id_left": log.id_left,
    }


class VisitorService:
    """Service for the visitor approval workflow."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = datetime.now,
        advance_notice: Optional[timedelta] = None,
    ):
        self.db = db
        self._clock = clock
        self.advance_notice = advance_notice or timedelta(hours=settings.advance_notice_hours)

    # ============== Reads ==============

    async def get_visitor(self, visitor_id: int) -> Visitor:
        result = await self.db.execute(
            select(Visitor)
            .options(selectinload(Visitor.logs))
            .where(Visitor.visitor_id == visitor_id)
            .execution_options(populate_existing=True)
        )
        visitor = result.unique().scalar_one_or_none()
        if visitor is None:
            raise VisitorNotFoundError(visitor_id)
        return visitor

    async def get_visitor_details(self, visitor_id: int) -> dict:
        """Visitor with tenant name, contact, room number and most relevant log."""
        return serialize_visitor(await self.get_visitor(visitor_id), include_details=True)

    async def list_visitors(
        self,
        tenant_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
    ) -> list[Visitor]:
        query = select(Visitor).options(selectinload(Visitor.logs)).order_by(Visitor.created_at.desc())
        if tenant_id is not None:
            query = query.where(Visitor.tenant_id == tenant_id)
        if status is not None:
            query = query.where(Visitor.approval_status == status)

        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.unique().scalars().all())

    # ============== Registration ==============

    async def submit_visitor(
        self,
        tenant_id: int,
        full_name: Optional[str],
        contact_number: Optional[str],
        purpose: Optional[str],
        expected_date: Optional[date],
        expected_time: Optional[time] = None,
    ) -> Visitor:
        """
        Register a visitor request for a tenant.

        Raises:
            ValidationError: MissingField or AdvanceNoticeTooShort
            TenantNotFoundError: If the tenant does not exist
        """
        values = {
            "full_name": full_name.strip() if full_name else full_name,
            "purpose": purpose.strip() if purpose else purpose,
            "expected_date": expected_date,
        }
        for field_name in REQUIRED_FIELDS:
            if not values[field_name]:
                logger.warning(f"Visitor registration for tenant {tenant_id} missing {field_name}")
                raise ValidationError(
                    f"Missing required field: {field_name}",
                    reason=ValidationError.MISSING_FIELD,
                    field=field_name,
                )

        self._check_advance_notice(expected_date, expected_time)

        if await self.db.get(Tenant, tenant_id) is None:
            raise TenantNotFoundError(tenant_id)

        visitor = Visitor(
            tenant_id=tenant_id,
            full_name=values["full_name"],
            purpose=values["purpose"],
            contact_number=contact_number,
            expected_date=expected_date,
            expected_time=expected_time,
            approval_status=ApprovalStatus.PENDING,
            created_at=self._clock(),
        )

        try:
            self.db.add(visitor)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Tenant {tenant_id} registered visitor {visitor.visitor_id} for {expected_date}")
        return await self.get_visitor(visitor.visitor_id)

    # ============== Decisions ==============

    async def approve_visitor(self, visitor_id: int, actor: Identity) -> Visitor:
        return await self._decide(visitor_id, actor, ApprovalStatus.APPROVED)

    async def deny_visitor(self, visitor_id: int, actor: Identity, reason: Optional[str] = None) -> Visitor:
        return await self._decide(visitor_id, actor, ApprovalStatus.DENIED, reason)

    async def set_status(
        self,
        visitor_id: int,
        actor: Identity,
        status: ApprovalStatus,
        reason: Optional[str] = None,
    ) -> Visitor:
        """
        Apply an approval status chosen by an admin.

        Pending is accepted only for a request that is still Pending.
        """
        status = ApprovalStatus(status)
        if status != ApprovalStatus.PENDING:
            return await self._decide(visitor_id, actor, status, reason)

        self._require_admin(actor)
        visitor = await self.get_visitor(visitor_id)
        if not visitor.is_pending:
            raise self._already_processed(visitor, status)
        return visitor

    async def _decide(
        self,
        visitor_id: int,
        actor: Identity,
        target: ApprovalStatus,
        reason: Optional[str] = None,
    ) -> Visitor:
        self._require_admin(actor)
        visitor = await self.get_visitor(visitor_id)

        if visitor.approval_status == target:
            logger.info(f"Visitor {visitor_id} already {target.value}; nothing to do")
            return visitor
        if not visitor.is_pending:
            raise self._already_processed(visitor, target)

        visitor.approval_status = target
        if target == ApprovalStatus.DENIED:
            visitor.denial_reason = reason

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Visitor {visitor_id} {target.value.lower()} by {actor.username}")
        return await self.get_visitor(visitor_id)

    # ============== Tenant edits ==============

    async def edit_visitor(self, visitor_id: int, tenant_id: int, fields: VisitorUpdate) -> Visitor:
        """
        Edit a Pending request owned by the tenant.

        Moving the visit re-applies the advance notice rule.

        Raises:
            VisitorNotFoundError: If the visitor does not exist
            AuthorizationError: If the tenant does not own the request
            InvalidStateError: If the request has already been decided
            ValidationError: NoFields or AdvanceNoticeTooShort
        """
        visitor = await self.get_visitor(visitor_id)
        self._ensure_editable(visitor, tenant_id, "update")

        changes = {
            key: value
            for key, value in fields.model_dump(exclude_unset=True).items()
            if value is not None or key not in REQUIRED_FIELDS
        }
        if not changes:
            raise ValidationError("No fields to update", reason=ValidationError.NO_FIELDS)

        if "expected_date" in changes or "expected_time" in changes:
            self._check_advance_notice(
                changes.get("expected_date", visitor.expected_date),
                changes.get("expected_time", visitor.expected_time),
            )

        for field_name, value in changes.items():
            setattr(visitor, field_name, value)

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Tenant {tenant_id} updated visitor {visitor_id}: {sorted(changes)}")
        return await self.get_visitor(visitor_id)

    async def delete_visitor(self, visitor_id: int, tenant_id: int) -> None:
        """Withdraw a Pending request owned by the tenant."""
        visitor = await self.get_visitor(visitor_id)
        self._ensure_editable(visitor, tenant_id, "delete")
        await self._delete(visitor_id)
        logger.info(f"Tenant {tenant_id} withdrew visitor {visitor_id}")

    async def admin_delete_visitor(self, visitor_id: int) -> None:
        """Remove a visitor in any state together with its logs."""
        await self.get_visitor(visitor_id)
        await self._delete(visitor_id)
        logger.info(f"Visitor {visitor_id} deleted by staff")

    # ============== Internals ==============

    async def _delete(self, visitor_id: int) -> None:
        try:
            await self.db.execute(delete(VisitorLog).where(VisitorLog.visitor_id == visitor_id))
            await self.db.execute(delete(Visitor).where(Visitor.visitor_id == visitor_id))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    def _check_advance_notice(self, expected_date: date, expected_time: Optional[time]) -> None:
        visit_at = datetime.combine(expected_date, expected_time or time(0, 0))
        earliest = self._clock() + self.advance_notice
        if visit_at < earliest:
            logger.warning(f"Visit at {visit_at} rejected: earliest allowed is {earliest}")
            hours = int(self.advance_notice.total_seconds() // 3600)
            raise ValidationError(
                f"Visitor registration must be submitted at least {hours} hours before the visit",
                reason=ValidationError.ADVANCE_NOTICE_TOO_SHORT,
                field="expected_date",
                details={"visit_at": visit_at.isoformat(), "earliest_allowed": earliest.isoformat()},
            )

    @staticmethod
    def _ensure_editable(visitor: Visitor, tenant_id: int, action: str) -> None:
        if visitor.tenant_id != tenant_id:
            raise AuthorizationError(f"You can only {action} your own visitors")
        if not visitor.is_pending:
            raise InvalidStateError(
                f"Cannot {action} visitor after approval/rejection",
                reason=InvalidStateError.ALREADY_PROCESSED,
                details={"current_status": ApprovalStatus(visitor.approval_status).value},
            )

    @staticmethod
    def _require_admin(actor: Identity) -> None:
        if not actor.has_role(RoleName.ADMIN):
            raise AuthorizationError("Access denied. Admin privileges required.", required_role=RoleName.ADMIN.value)

    @staticmethod
    def _already_processed(visitor: Visitor, target: ApprovalStatus) -> InvalidStateError:
        current = ApprovalStatus(visitor.approval_status)
        return InvalidStateError(
            f"Visitor has already been {current.value.lower()}",
            reason=InvalidStateError.ALREADY_PROCESSED,
            details={"current_status": current.value, "requested_status": target.value},
        )
