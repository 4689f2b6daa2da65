"""
Client-side read-through cache of the DormGuard collections.

``DataStore`` keeps the last server snapshot of visitors, visitor logs,
tenants and rooms, tells subscribers whenever it changes, and joins them
into per-visitor detail views for dashboards.

Fetch failures never empty a collection: the last good copy is kept and
``sync_error`` says what went wrong. The joined view is memoized against a
generation counter that every refresh and every successful mutation bumps,
so it can never be served stale after a change this process observed.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional

from app.client.api_client import APIError, DormGuardClient
from app.constants.roles import RoleName
from app.schemas.room import RoomResponse
from app.schemas.tenant import TenantCreate, TenantResponse, TenantUpdate
from app.schemas.visitor import VisitorCreate, VisitorDetailResponse, VisitorResponse, VisitorUpdate
from app.schemas.visitor_log import VisitorLogDetailResponse
from app.utils.visitor_views import select_relevant_log

logger = logging.getLogger(__name__)

VISITORS = "visitors"
LOGS = "logs"
TENANTS = "tenants"
ROOMS = "rooms"
ALL_COLLECTIONS = (VISITORS, LOGS, TENANTS, ROOMS)

# Collections each role is allowed to read
ROLE_COLLECTIONS = {
    RoleName.ADMIN: ALL_COLLECTIONS,
    RoleName.HELPDESK: (VISITORS, LOGS),
    RoleName.TENANT: (VISITORS,),
}

Listener = Callable[[], None]


def collections_for_role(role: RoleName | str) -> tuple[str, ...]:
    return ROLE_COLLECTIONS[RoleName.from_claim(role)]


def describe_time_since_sync(last_sync: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human staleness indicator: Never, Just now, Ns ago, Nm ago."""
    if last_sync is None:
        return "Never"

    seconds = int(((now or datetime.now()) - last_sync).total_seconds())
    if seconds < 5:
        return "Just now"
    if seconds < 60:
        return f"{seconds}s ago"
    return f"{seconds // 60}m ago"


@dataclass
class SyncResult:
    """Outcome of one refresh pass."""

    started_at: datetime
    finished_at: datetime
    refreshed: tuple[str, ...] = ()
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def duration_ms(self) -> float:
        return (self.finished_at - self.started_at).total_seconds() * 1000


class DataStore:
    """
    Polling cache over the DormGuard API.

    Args:
        client: Authenticated API client
        collections: Collections to fetch; staff without admin rights cannot
            read tenants or rooms (see ``collections_for_role``)
        clock: Source of sync timestamps
    """

    def __init__(
        self,
        client: DormGuardClient,
        collections: Iterable[str] = ALL_COLLECTIONS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.collections = tuple(collections)
        unknown = set(self.collections) - set(ALL_COLLECTIONS)
        if unknown:
            raise ValueError(f"Unknown collections: {sorted(unknown)}")
        self._clock = clock

        self._visitors: list[VisitorResponse] = []
        self._logs: list[VisitorLogDetailResponse] = []
        self._tenants: list[TenantResponse] = []
        self._rooms: list[RoomResponse] = []

        self._listeners: list[Listener] = []
        self._generation = 0
        self._details_memo: Optional[tuple[int, list[VisitorDetailResponse]]] = None

        self.is_syncing = False
        self.last_sync: Optional[datetime] = None
        self.sync_error: Optional[str] = None
        self.failed_collections: dict[str, str] = {}

    # ============== Subscription ==============

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self._generation += 1
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Data store subscriber raised; continuing with the rest")

    @property
    def generation(self) -> int:
        return self._generation

    # ============== Sync ==============

    async def refresh_all(self) -> SyncResult:
        return await self.refresh(*self.collections)

    async def refresh(self, *names: str) -> SyncResult:
        """
        Fetch the named collections concurrently and replace each one that
        came back. Never raises for fetch failures.
        """
        names = tuple(name for name in names if name in self.collections)
        fetchers = {
            VISITORS: self.client.get_visitors,
            LOGS: self.client.get_visitor_logs,
            TENANTS: self.client.get_tenants,
            ROOMS: self.client.get_rooms,
        }

        self.is_syncing = True
        started = self._clock()
        try:
            results = await asyncio.gather(*(fetchers[name]() for name in names), return_exceptions=True)
        finally:
            self.is_syncing = False

        refreshed = []
        failed = {}
        for name, result in zip(names, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, APIError):
                logger.warning(f"Refreshing {name} failed: {result.message}")
                failed[name] = result.message
            elif isinstance(result, Exception):
                logger.error(f"Refreshing {name} failed unexpectedly", exc_info=result)
                failed[name] = str(result) or type(result).__name__
            else:
                self._replace_collection(name, result)
                refreshed.append(name)

        finished = self._clock()
        for name in refreshed:
            self.failed_collections.pop(name, None)
        self.failed_collections.update(failed)
        self.sync_error = "; ".join(f"{name}: {msg}" for name, msg in self.failed_collections.items()) or None
        if refreshed:
            self.last_sync = finished

        result = SyncResult(started_at=started, finished_at=finished, refreshed=tuple(refreshed), failed=failed)
        logger.debug(f"Data store refresh took {result.duration_ms:.2f}ms (failed: {sorted(failed)})")
        self._changed()
        return result

    def _replace_collection(self, name: str, items: list) -> None:
        if name == VISITORS:
            self._visitors = [VisitorResponse.model_validate(item.model_dump()) for item in items]
        elif name == LOGS:
            self._logs = list(items)
        elif name == TENANTS:
            self._tenants = list(items)
        elif name == ROOMS:
            self._rooms = list(items)

    # ============== Reads ==============

    def get_visitors(self) -> list[VisitorResponse]:
        return list(self._visitors)

    def get_visitor_logs(self) -> list[VisitorLogDetailResponse]:
        return list(self._logs)

    def get_tenants(self) -> list[TenantResponse]:
        return list(self._tenants)

    def get_rooms(self) -> list[RoomResponse]:
        return list(self._rooms)

    def get_all_visitors_with_details(self) -> list[VisitorDetailResponse]:
        """
        Every visitor joined with its tenant, room and most relevant log.

        The returned list is shared until the next change; do not mutate it.
        """
        if self._details_memo is not None and self._details_memo[0] == self._generation:
            return self._details_memo[1]

        tenants = {tenant.tenant_id: tenant for tenant in self._tenants}
        rooms = {room.room_id: room for room in self._rooms}
        logs_by_visitor: dict[int, list[VisitorLogDetailResponse]] = {}
        for log in self._logs:
            logs_by_visitor.setdefault(log.visitor_id, []).append(log)

        details = [self._join(visitor, tenants, rooms, logs_by_visitor) for visitor in self._visitors]
        self._details_memo = (self._generation, details)
        return details

    def get_visitor_with_details(self, visitor_id: int) -> Optional[VisitorDetailResponse]:
        return next(
            (visitor for visitor in self.get_all_visitors_with_details() if visitor.visitor_id == visitor_id),
            None,
        )

    def get_tenant_with_room(self, tenant_id: int) -> Optional[TenantResponse]:
        tenant = next((t for t in self._tenants if t.tenant_id == tenant_id), None)
        if tenant is None:
            return None

        room = next((r for r in self._rooms if r.room_id == tenant.room_id), None)
        return tenant.model_copy(
            update={
                "room_number": room.room_number if room else "N/A",
                "room_building": room.building if room else None,
                "room_capacity": room.capacity if room else 0,
                "room_current_occupants": room.current_occupants if room else 0,
            }
        )

    @staticmethod
    def _join(visitor, tenants, rooms, logs_by_visitor) -> VisitorDetailResponse:
        tenant = tenants.get(visitor.tenant_id)
        room = rooms.get(tenant.room_id) if tenant else None
        return VisitorDetailResponse(
            **visitor.model_dump(),
            tenant_name=tenant.full_name if tenant else "Unknown",
            tenant_room_number=room.room_number if room else "N/A",
            tenant_contact=(tenant.contact_number if tenant else None) or "N/A",
            log=select_relevant_log(logs_by_visitor.get(visitor.visitor_id, ())),
        )

    # ============== Mutations ==============

    async def add_visitor(self, data: VisitorCreate) -> VisitorDetailResponse:
        visitor = await self.client.register_visitor(data)
        self._upsert_visitor(visitor)
        self._changed()
        return visitor

    async def update_visitor(self, visitor_id: int, updates: VisitorUpdate) -> VisitorDetailResponse:
        visitor = await self.client.update_my_visitor(visitor_id, updates)
        self._upsert_visitor(visitor)
        self._changed()
        return visitor

    async def delete_visitor(self, visitor_id: int) -> None:
        await self.client.delete_my_visitor(visitor_id)
        self._drop_visitors({visitor_id})
        self._changed()

    async def approve_visitor(self, visitor_id: int) -> VisitorDetailResponse:
        visitor = await self.client.approve_visitor(visitor_id)
        self._upsert_visitor(visitor)
        self._changed()
        return visitor

    async def deny_visitor(self, visitor_id: int, reason: Optional[str] = None) -> VisitorDetailResponse:
        visitor = await self.client.reject_visitor(visitor_id, reason)
        self._upsert_visitor(visitor)
        self._changed()
        return visitor

    async def add_tenant(self, data: TenantCreate) -> TenantResponse:
        tenant = await self.client.create_tenant(data)
        self._tenants = self._upsert(self._tenants, tenant, "tenant_id")
        self._changed()
        await self.refresh(ROOMS)
        return tenant

    async def update_tenant(self, tenant_id: int, updates: TenantUpdate) -> TenantResponse:
        tenant = await self.client.update_tenant(tenant_id, updates)
        self._tenants = self._upsert(self._tenants, tenant, "tenant_id")
        self._changed()
        if "status" in updates.model_fields_set:
            await self.refresh(ROOMS)
        return tenant

    async def delete_tenant(self, tenant_id: int) -> None:
        await self.client.delete_tenant(tenant_id)
        self._tenants = [t for t in self._tenants if t.tenant_id != tenant_id]
        self._drop_visitors({v.visitor_id for v in self._visitors if v.tenant_id == tenant_id})
        self._changed()
        await self.refresh(ROOMS)

    async def check_in(
        self, visitor_id: int, processed_by: Optional[int] = None, id_left: Optional[str] = None
    ) -> VisitorLogDetailResponse:
        log = await self.client.check_in(visitor_id, processed_by=processed_by, id_left=id_left)
        self._logs = self._upsert(self._logs, log, "log_id")
        self._changed()
        return log

    async def check_out(self, visitor_id: int) -> VisitorLogDetailResponse:
        log = await self.client.check_out(visitor_id)
        self._logs = self._upsert(self._logs, log, "log_id")
        self._changed()
        return log

    def _upsert_visitor(self, visitor: VisitorDetailResponse) -> None:
        plain = VisitorResponse.model_validate(visitor.model_dump())
        self._visitors = self._upsert(self._visitors, plain, "visitor_id")

    def _drop_visitors(self, visitor_ids: set[int]) -> None:
        self._visitors = [v for v in self._visitors if v.visitor_id not in visitor_ids]
        self._logs = [log for log in self._logs if log.visitor_id not in visitor_ids]

    @staticmethod
    def _upsert(items: list, item, key: str) -> list:
        item_id = getattr(item, key)
        for index, existing in enumerate(items):
            if getattr(existing, key) == item_id:
                return items[:index] + [item] + items[index + 1 :]
        return items + [item]
