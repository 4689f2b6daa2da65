"""
Visitor Model

A visit request registered by a tenant. ``approval_status`` moves from
Pending to Approved or Denied and stays there.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import relationship

from app.database import Base


class ApprovalStatus(str, enum.Enum):
    """Visitor approval states (stored literals are part of the wire contract)."""

    PENDING = "Pending"
    APPROVED = "Approved"
    DENIED = "Denied"


class Visitor(Base):
    __tablename__ = "visitors"

    visitor_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.tenant_id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    contact_number = Column(String(30), nullable=True)
    purpose = Column(Text, nullable=False)
    expected_date = Column(Date, nullable=False)
    expected_time = Column(Time, nullable=True)
    approval_status = Column(
        Enum(ApprovalStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )
    denial_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    tenant = relationship("Tenant", lazy="joined")
    logs = relationship(
        "VisitorLog",
        back_populates="visitor",
        lazy="raise",
        passive_deletes=True,
        order_by="VisitorLog.check_in_time",
    )

    @property
    def is_pending(self) -> bool:
        return self.approval_status == ApprovalStatus.PENDING

    def __repr__(self) -> str:
        return f"<Visitor(id={self.visitor_id}, name={self.full_name}, status={self.approval_status})>"
