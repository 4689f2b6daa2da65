"""Constants package for DormGuard."""

from .auth import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from .roles import STAFF_ROLE_MAP, STAFF_ROLES, RoleName, StaffRole, has_role

__all__ = [
    # Role constants
    "RoleName",
    "StaffRole",
    "STAFF_ROLE_MAP",
    "STAFF_ROLES",
    "has_role",
    # Auth constants
    "SECRET_KEY",
    "ALGORITHM",
    "ACCESS_TOKEN_EXPIRE_MINUTES",
]
