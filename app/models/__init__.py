from .admin import Admin
from .room import Room
from .tenant import Tenant, TenantStatus
from .visitor import ApprovalStatus, Visitor
from .visitor_log import VisitorLog

__all__ = [
    "Admin",
    "Room",
    "Tenant",
    "TenantStatus",
    "Visitor",
    "ApprovalStatus",
    "VisitorLog",
]
