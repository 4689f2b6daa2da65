"""
DormGuard API Client

Async HTTP client over the ``/api`` surface. Responses are parsed into the
same pydantic schemas the server renders; any non-2xx response or transport
failure raises ``APIError`` built from the server's error envelope.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from app.config import settings
from app.models.visitor import ApprovalStatus
from app.schemas.auth import AdminCreate, AdminResponse
from app.schemas.dashboard import DashboardStats
from app.schemas.room import RoomResponse
from app.schemas.tenant import TenantCreate, TenantResponse, TenantUpdate
from app.schemas.token import AuthUser, Token
from app.schemas.visitor import AdminVisitorCreate, VisitorCreate, VisitorDetailResponse, VisitorUpdate
from app.schemas.visitor_log import VisitorLogDetailResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """A request the server refused or that never reached it."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    @property
    def reason(self) -> Optional[str]:
        """Failed precondition named by the server (e.g. ``RoomFull``)."""
        return self.details.get("reason")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIError":
        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return cls(
                message=error.get("message") or response.reason_phrase,
                status_code=response.status_code,
                error_code=error.get("error_code"),
                details=error.get("details"),
            )
        return cls(message=response.text or response.reason_phrase, status_code=response.status_code)

    def __repr__(self) -> str:
        return f"APIError(status_code={self.status_code}, error_code={self.error_code!r}, message={self.message!r})"


def _payload(model: BaseModel) -> dict:
    return model.model_dump(mode="json", exclude_unset=True)


class DormGuardClient:
    """
    Thin async wrapper around the DormGuard REST API.

    Usage:
        async with DormGuardClient("http://localhost:8000") as client:
            await client.login("admin", "secret")
            visitors = await client.get_visitors()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=(base_url or settings.api_base_url).rstrip("/") + "/api",
            timeout=timeout,
            transport=transport,
        )
        self.token = token
        self.user: Optional[AuthUser] = None

    async def __aenter__(self) -> "DormGuardClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out")
            raise APIError("Request timed out", error_code="SERVICE_UNAVAILABLE") from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise APIError(f"Request error: {e}", error_code="SERVICE_UNAVAILABLE") from e

        if response.is_error:
            error = APIError.from_response(response)
            logger.debug(f"{method} {path} -> {response.status_code} {error.error_code}")
            raise error

        return response.json() if response.content else None

    # ============== Auth ==============

    async def login(self, username: str, password: str) -> Token:
        data = await self._request("POST", "/auth/login", json={"username": username, "password": password})
        token = Token.model_validate(data)
        self.token = token.access_token
        self.user = token.user
        return token

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")
        self.token = None
        self.user = None

    async def me(self) -> AuthUser:
        return AuthUser.model_validate(await self._request("GET", "/auth/me"))

    async def register_admin(self, data: AdminCreate) -> AdminResponse:
        return AdminResponse.model_validate(await self._request("POST", "/auth/register-admin", json=_payload(data)))

    async def health(self) -> dict:
        return await self._request("GET", "/health")

    # ============== Tenants & rooms ==============

    async def get_tenants(self) -> list[TenantResponse]:
        return [TenantResponse.model_validate(item) for item in await self._request("GET", "/tenants")]

    async def get_tenant(self, tenant_id: int) -> TenantResponse:
        return TenantResponse.model_validate(await self._request("GET", f"/tenants/{tenant_id}"))

    async def create_tenant(self, data: TenantCreate) -> TenantResponse:
        return TenantResponse.model_validate(await self._request("POST", "/admin/create-tenant", json=_payload(data)))

    async def update_tenant(self, tenant_id: int, updates: TenantUpdate) -> TenantResponse:
        data = await self._request("PUT", f"/tenants/{tenant_id}", json=_payload(updates))
        return TenantResponse.model_validate(data)

    async def delete_tenant(self, tenant_id: int) -> None:
        await self._request("DELETE", f"/tenants/{tenant_id}")

    async def get_rooms(self) -> list[RoomResponse]:
        return [RoomResponse.model_validate(item) for item in await self._request("GET", "/admin/rooms")]

    async def get_dashboard_stats(self) -> DashboardStats:
        return DashboardStats.model_validate(await self._request("GET", "/admin/dashboard-stats"))

    # ============== Tenant portal ==============

    async def get_profile(self) -> TenantResponse:
        return TenantResponse.model_validate(await self._request("GET", "/tenant/profile"))

    async def register_visitor(self, data: VisitorCreate) -> VisitorDetailResponse:
        data = await self._request("POST", "/tenant/register-visitor", json=_payload(data))
        return VisitorDetailResponse.model_validate(data)

    async def get_my_visitors(self) -> list[VisitorDetailResponse]:
        return [VisitorDetailResponse.model_validate(item) for item in await self._request("GET", "/tenant/visitors")]

    async def update_my_visitor(self, visitor_id: int, updates: VisitorUpdate) -> VisitorDetailResponse:
        data = await self._request("PUT", f"/tenant/visitors/{visitor_id}", json=_payload(updates))
        return VisitorDetailResponse.model_validate(data)

    async def delete_my_visitor(self, visitor_id: int) -> None:
        await self._request("DELETE", f"/tenant/visitors/{visitor_id}")

    # ============== Visitors ==============

    async def get_visitors(self, approval_status: Optional[ApprovalStatus] = None) -> list[VisitorDetailResponse]:
        params = {"approval_status": ApprovalStatus(approval_status).value} if approval_status else None
        data = await self._request("GET", "/visitors", params=params)
        return [VisitorDetailResponse.model_validate(item) for item in data]

    async def get_visitor(self, visitor_id: int) -> VisitorDetailResponse:
        return VisitorDetailResponse.model_validate(await self._request("GET", f"/visitors/{visitor_id}"))

    async def get_tenant_visitors(self, tenant_id: int) -> list[VisitorDetailResponse]:
        data = await self._request("GET", f"/visitors/tenant/{tenant_id}")
        return [VisitorDetailResponse.model_validate(item) for item in data]

    async def create_visitor(self, data: AdminVisitorCreate) -> VisitorDetailResponse:
        return VisitorDetailResponse.model_validate(await self._request("POST", "/visitors", json=_payload(data)))

    async def set_visitor_status(
        self, visitor_id: int, status: ApprovalStatus, reason: Optional[str] = None
    ) -> VisitorDetailResponse:
        body = {"approval_status": ApprovalStatus(status).value, "reason": reason}
        return VisitorDetailResponse.model_validate(await self._request("PUT", f"/visitors/{visitor_id}/status", json=body))

    async def delete_visitor(self, visitor_id: int) -> None:
        await self._request("DELETE", f"/visitors/{visitor_id}")

    async def approve_visitor(self, visitor_id: int) -> VisitorDetailResponse:
        return VisitorDetailResponse.model_validate(await self._request("PUT", f"/admin/approve-visitor/{visitor_id}"))

    async def reject_visitor(self, visitor_id: int, reason: Optional[str] = None) -> VisitorDetailResponse:
        data = await self._request("PUT", f"/admin/reject-visitor/{visitor_id}", json={"reason": reason})
        return VisitorDetailResponse.model_validate(data)

    # ============== Visitor logs ==============

    async def get_visitor_logs(self) -> list[VisitorLogDetailResponse]:
        return [VisitorLogDetailResponse.model_validate(item) for item in await self._request("GET", "/visitor-logs")]

    async def get_active_visitors(self) -> list[VisitorLogDetailResponse]:
        data = await self._request("GET", "/visitor-logs/active")
        return [VisitorLogDetailResponse.model_validate(item) for item in data]

    async def get_visitor_log(self, log_id: int) -> VisitorLogDetailResponse:
        return VisitorLogDetailResponse.model_validate(await self._request("GET", f"/visitor-logs/{log_id}"))

    async def get_logs_for_visitor(self, visitor_id: int) -> list[VisitorLogDetailResponse]:
        data = await self._request("GET", f"/visitor-logs/visitor/{visitor_id}")
        return [VisitorLogDetailResponse.model_validate(item) for item in data]

    async def check_in(
        self, visitor_id: int, processed_by: Optional[int] = None, id_left: Optional[str] = None
    ) -> VisitorLogDetailResponse:
        body = {"visitor_id": visitor_id, "processed_by": processed_by, "id_left": id_left}
        return VisitorLogDetailResponse.model_validate(await self._request("POST", "/visitor-logs/check-in", json=body))

    async def check_out(self, visitor_id: int) -> VisitorLogDetailResponse:
        data = await self._request("POST", "/visitor-logs/check-out", json={"visitor_id": visitor_id})
        return VisitorLogDetailResponse.model_validate(data)
