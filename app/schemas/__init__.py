from .auth import AdminCreate, AdminResponse, LoginRequest, LogoutResponse
from .dashboard import DashboardStats
from .room import RoomResponse
from .tenant import TenantCreate, TenantResponse, TenantUpdate
from .token import AuthUser, Token
from .visitor import (
    AdminVisitorCreate,
    VisitorCreate,
    VisitorDecision,
    VisitorDetailResponse,
    VisitorResponse,
    VisitorStatusUpdate,
    VisitorUpdate,
)
from .visitor_log import CheckInRequest, CheckOutRequest, VisitorLogDetailResponse, VisitorLogResponse

# Define the public API of this module
__all__ = [
    "AdminCreate",
    "AdminResponse",
    "LoginRequest",
    "LogoutResponse",
    "AuthUser",
    "Token",
    "DashboardStats",
    "RoomResponse",
    "TenantCreate",
    "TenantUpdate",
    "TenantResponse",
    "VisitorCreate",
    "AdminVisitorCreate",
    "VisitorUpdate",
    "VisitorStatusUpdate",
    "VisitorDecision",
    "VisitorResponse",
    "VisitorDetailResponse",
    "CheckInRequest",
    "CheckOutRequest",
    "VisitorLogResponse",
    "VisitorLogDetailResponse",
]
