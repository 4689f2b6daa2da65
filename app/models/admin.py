from sqlalchemy import Column, Date, Enum, Integer, String, func

from app.constants.roles import STAFF_ROLE_MAP, RoleName, StaffRole
from app.database import Base


# Staff account (administrators and help desk)
class Admin(Base):
    __tablename__ = "admins"

    admin_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)  # bcrypt hash
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    contact_number = Column(String(30), nullable=True)
    employed_date = Column(Date, nullable=True, server_default=func.current_date())
    role = Column(
        Enum(StaffRole, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=StaffRole.ADMIN,
    )

    @property
    def role_name(self) -> RoleName:
        return STAFF_ROLE_MAP[StaffRole(self.role)]

    def __repr__(self) -> str:
        return f"<Admin(id={self.admin_id}, username={self.username}, role={self.role})>"
