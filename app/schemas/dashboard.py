from pydantic import BaseModel


class DashboardStats(BaseModel):
    active_tenants: int = 0
    pending_approvals: int = 0
    active_visitors: int = 0
    today_visitors: int = 0
