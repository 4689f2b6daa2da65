"""
Tenant Model

A resident holding at most one room slot. The pair (room_id, status)
determines whether the tenant counts towards the room's occupancy.
"""

import enum

from sqlalchemy import Column, Date, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from app.database import Base


class TenantStatus(str, enum.Enum):
    """Tenant lifecycle states (stored literals are part of the wire contract)."""

    ACTIVE = "Active"
    MOVED_OUT = "Moved Out"
    SUSPENDED = "Suspended"


class Tenant(Base):
    __tablename__ = "tenants"

    tenant_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    room_id = Column(Integer, ForeignKey("rooms.room_id", ondelete="RESTRICT"), nullable=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)  # bcrypt hash
    full_name = Column(String(100), nullable=False)
    contact_number = Column(String(30), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    emergency_contact_name = Column(String(100), nullable=True)
    emergency_contact_number = Column(String(30), nullable=True)
    move_in_date = Column(Date, nullable=False, server_default=func.current_date())
    status = Column(
        Enum(TenantStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=TenantStatus.ACTIVE,
    )

    room = relationship("Room", lazy="joined")

    @property
    def holds_room_slot(self) -> bool:
        """True while the tenant is counted in its room's occupancy."""
        return self.room_id is not None and self.status != TenantStatus.MOVED_OUT

    def __repr__(self) -> str:
        return f"<Tenant(id={self.tenant_id}, username={self.username}, status={self.status})>"
