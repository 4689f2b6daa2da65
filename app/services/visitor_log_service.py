"""
Visitor Log Service

Help desk check-in/check-out ledger. Only Approved visitors may enter and
a visitor holds at most one open session at a time.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidStateError, StaffNotFoundError, VisitorLogNotFoundError, VisitorNotFoundError
from app.models.admin import Admin
from app.models.visitor import ApprovalStatus, Visitor
from app.models.visitor_log import VisitorLog

logger = logging.getLogger(__name__)


def serialize_log(log: VisitorLog) -> dict:
    visitor = log.visitor
    tenant = visitor.tenant if visitor else None
    room = tenant.room if tenant else None
    return {
        "log_id": log.log_id,
        "visitor_id": log.visitor_id,
        "check_in_time": log.check_in_time,
        "check_out_time": log.check_out_time,
        "processed_by": log.processed_by,
        "id_left": log.id_left,
        "visitor_name": visitor.full_name if visitor else None,
        "purpose": visitor.purpose if visitor else None,
        "visit_date": visitor.expected_date if visitor else None,
        "approval_status": visitor.approval_status if visitor else None,
        "tenant_name": tenant.full_name if tenant else None,
        "room_number": room.room_number if room else None,
        "processed_by_name": log.processor.full_name if log.processor else None,
    }


class VisitorLogService:
    """Service for visitor check-in and check-out."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self._clock = clock

    async def check_in(
        self,
        visitor_id: int,
        processed_by: Optional[int] = None,
        id_left: Optional[str] = None,
    ) -> VisitorLog:
        """
        Open a session for an approved visitor.

        The visitor row is locked for the duration so two desks cannot both
        admit the same visitor.

        Raises:
            VisitorNotFoundError: If the visitor does not exist
            InvalidStateError: NotApproved or AlreadyCheckedIn
            StaffNotFoundError: If processed_by names no staff account
        """
        try:
            visitor = await self._lock_visitor(visitor_id)

            if visitor.approval_status != ApprovalStatus.APPROVED:
                raise InvalidStateError(
                    "Visitor is not approved for entry",
                    reason=InvalidStateError.NOT_APPROVED,
                    details={"approval_status": ApprovalStatus(visitor.approval_status).value},
                )

            open_log = await self._latest_open_log(visitor_id)
            if open_log is not None:
                raise InvalidStateError(
                    "Visitor is already checked in",
                    reason=InvalidStateError.ALREADY_CHECKED_IN,
                    details={"log_id": open_log.log_id},
                )

            if processed_by is not None and await self.db.get(Admin, processed_by) is None:
                logger.warning(f"Check-in of visitor {visitor_id} rejected: unknown staff id {processed_by}")
                raise StaffNotFoundError(processed_by)

            log = VisitorLog(
                visitor_id=visitor_id,
                check_in_time=self._clock(),
                processed_by=processed_by,
                id_left=id_left,
            )
            self.db.add(log)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Visitor {visitor_id} checked in (log={log.log_id}, processed_by={processed_by})")
        return await self.get_log(log.log_id)

    async def check_out(self, visitor_id: int) -> VisitorLog:
        """
        Close the visitor's open session.

        Raises:
            VisitorNotFoundError: If the visitor does not exist
            InvalidStateError: NoOpenSession
        """
        try:
            await self._lock_visitor(visitor_id)

            log = await self._latest_open_log(visitor_id)
            if log is None:
                raise InvalidStateError(
                    "No active check-in found for this visitor",
                    reason=InvalidStateError.NO_OPEN_SESSION,
                    details={"visitor_id": visitor_id},
                )

            log.check_out_time = self._clock()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Visitor {visitor_id} checked out (log={log.log_id})")
        return await self.get_log(log.log_id)

    async def get_log(self, log_id: int) -> VisitorLog:
        result = await self.db.execute(
            select(VisitorLog).where(VisitorLog.log_id == log_id).execution_options(populate_existing=True)
        )
        log = result.unique().scalar_one_or_none()
        if log is None:
            raise VisitorLogNotFoundError(log_id)
        return log

    async def list_all(self) -> list[VisitorLog]:
        return await self._list()

    async def list_active(self) -> list[VisitorLog]:
        return await self._list(VisitorLog.check_in_time.is_not(None), VisitorLog.check_out_time.is_(None))

    async def list_by_visitor(self, visitor_id: int) -> list[VisitorLog]:
        if await self.db.get(Visitor, visitor_id) is None:
            raise VisitorNotFoundError(visitor_id)
        return await self._list(VisitorLog.visitor_id == visitor_id)

    async def _list(self, *conditions) -> list[VisitorLog]:
        query = (
            select(VisitorLog)
            .where(*conditions)
            .order_by(VisitorLog.check_in_time.desc(), VisitorLog.log_id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.unique().scalars().all())

    async def _lock_visitor(self, visitor_id: int) -> Visitor:
        result = await self.db.execute(
            select(Visitor)
            .where(Visitor.visitor_id == visitor_id)
            .with_for_update(of=Visitor)
            .execution_options(populate_existing=True)
        )
        visitor = result.unique().scalar_one_or_none()
        if visitor is None:
            raise VisitorNotFoundError(visitor_id)
        return visitor

    async def _latest_open_log(self, visitor_id: int) -> Optional[VisitorLog]:
        result = await self.db.execute(
            select(VisitorLog)
            .where(
                VisitorLog.visitor_id == visitor_id,
                VisitorLog.check_in_time.is_not(None),
                VisitorLog.check_out_time.is_(None),
            )
            .order_by(VisitorLog.check_in_time.desc())
            .limit(1)
        )
        return result.unique().scalars().first()
