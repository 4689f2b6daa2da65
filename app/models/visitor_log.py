"""
Visitor Log Model

Append-only check-in/check-out ledger. A row is "open" while
``check_out_time`` is NULL; a visitor has at most one open row.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class VisitorLog(Base):
    __tablename__ = "visitor_logs"

    log_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    visitor_id = Column(Integer, ForeignKey("visitors.visitor_id", ondelete="CASCADE"), nullable=False, index=True)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    processed_by = Column(Integer, ForeignKey("admins.admin_id", ondelete="SET NULL"), nullable=True)
    id_left = Column(String(100), nullable=True)

    visitor = relationship("Visitor", back_populates="logs", lazy="joined")
    processor = relationship("Admin", lazy="joined")

    __table_args__ = (Index("ix_visitor_logs_open_sessions", "visitor_id", "check_out_time"),)

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    def __repr__(self) -> str:
        return f"<VisitorLog(id={self.log_id}, visitor={self.visitor_id}, open={self.is_open})>"
