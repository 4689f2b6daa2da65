"""
Room Model

Capacity and occupancy bookkeeping for dormitory rooms. ``current_occupants``
is only ever written by the tenant ledger, through atomic conditional
updates.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String

from app.database import Base


class Room(Base):
    __tablename__ = "rooms"

    room_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    room_number = Column(String(20), unique=True, nullable=False)
    building = Column(String(100), nullable=True)
    capacity = Column(Integer, nullable=False)
    current_occupants = Column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_rooms_capacity_positive"),
        CheckConstraint(
            "current_occupants >= 0 AND current_occupants <= capacity",
            name="ck_rooms_occupancy_within_capacity",
        ),
    )

    @property
    def is_full(self) -> bool:
        return self.current_occupants >= self.capacity

    def __repr__(self) -> str:
        return f"<Room(id={self.room_id}, number={self.room_number}, {self.current_occupants}/{self.capacity})>"
