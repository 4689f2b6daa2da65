"""
Tenant Service

Tenant lifecycle and room occupancy ledger.

Every change to ``rooms.current_occupants`` happens here, inside the same
transaction as the tenant write that causes it. Occupancy moves through a
single conditional UPDATE so concurrent move-ins and move-outs on the same
room are serialized by the database rather than by the application.

Occupancy effects of a status change:

    Active    -> Moved Out   release one slot
    Moved Out -> Active      take one slot (fails when the room is full)
    anything else            no occupancy change
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import Admin
from app.models.room import Room
from app.models.tenant import Tenant, TenantStatus
from app.models.visitor import Visitor
from app.models.visitor_log import VisitorLog
from app.auth import hash_password
from app.exceptions import (
    DatabaseError,
    DuplicateResourceError,
    InvalidStateError,
    RoomNotFoundError,
    TenantNotFoundError,
    ValidationError,
)
from app.schemas.tenant import TenantCreate, TenantUpdate

logger = logging.getLogger(__name__)

# Profile fields that may be cleared with an explicit null
NULLABLE_FIELDS = {"emergency_contact_name", "emergency_contact_number"}


def serialize_tenant(tenant: Tenant) -> dict:
    """Flatten a tenant and its room into the response shape."""
    room = tenant.room
    return {
        "tenant_id": tenant.tenant_id,
        "room_id": tenant.room_id,
        "username": tenant.username,
        "full_name": tenant.full_name,
        "contact_number": tenant.contact_number,
        "email": tenant.email,
        "emergency_contact_name": tenant.emergency_contact_name,
        "emergency_contact_number": tenant.emergency_contact_number,
        "move_in_date": tenant.move_in_date,
        "status": tenant.status,
        "room_number": room.room_number if room else None,
        "room_building": room.building if room else None,
        "room_capacity": room.capacity if room else None,
        "room_current_occupants": room.current_occupants if room else None,
    }


class TenantService:
    """Service for tenant records and the room occupancy they hold."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self._clock = clock

    # ============== Reads ==============

    async def list_rooms(self) -> list[Room]:
        result = await self.db.execute(
            select(Room).order_by(Room.room_number).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_room(self, room_id: int) -> Room:
        result = await self.db.execute(
            select(Room).where(Room.room_id == room_id).execution_options(populate_existing=True)
        )
        room = result.scalar_one_or_none()
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    async def list_tenants(self) -> list[Tenant]:
        result = await self.db.execute(
            select(Tenant).order_by(Tenant.full_name).execution_options(populate_existing=True)
        )
        return list(result.unique().scalars().all())

    async def get_tenant(self, tenant_id: int) -> Tenant:
        result = await self.db.execute(
            select(Tenant).where(Tenant.tenant_id == tenant_id).execution_options(populate_existing=True)
        )
        tenant = result.unique().scalar_one_or_none()
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    # ============== Registration ==============

    async def register_tenant(self, data: TenantCreate) -> Tenant:
        """
        Register a tenant and take a slot in the target room.

        The insert and the occupancy increment commit together or not at all.

        Raises:
            DuplicateResourceError: If the username or email is taken
            RoomNotFoundError: If the room does not exist
            InvalidStateError: If the room is at full capacity
        """
        await self._ensure_unique(username=data.username, email=data.email)

        room = await self.get_room(data.room_id)
        if room.is_full:
            logger.warning(f"Registration rejected: room {room.room_number} is full")
            raise self._room_full(room.room_id)

        tenant = Tenant(
            username=data.username,
            password=hash_password(data.password),
            full_name=data.full_name,
            email=data.email,
            contact_number=data.contact_number,
            room_id=data.room_id,
            emergency_contact_name=data.emergency_contact_name,
            emergency_contact_number=data.emergency_contact_number,
            move_in_date=data.move_in_date or self._clock().date(),
            status=TenantStatus.ACTIVE,
        )

        try:
            self.db.add(tenant)
            await self.db.flush()
            await self._take_slot(data.room_id)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Tenant registration hit a uniqueness constraint: {e.orig}")
            raise DuplicateResourceError("Tenant", "username or email", data.username) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Tenant registration failed in the database: {e}")
            raise DatabaseError("Could not register tenant", operation="register_tenant") from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Registered tenant '{tenant.username}' (id={tenant.tenant_id}) into room {room.room_number}")
        return await self.get_tenant(tenant.tenant_id)

    # ============== Lifecycle ==============

    async def set_tenant_status(self, tenant_id: int, new_status: TenantStatus) -> Tenant:
        """
        Move a tenant to a new status, adjusting room occupancy atomically.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            InvalidStateError: If a returning tenant's room is full
        """
        try:
            tenant = await self._lock_tenant(tenant_id)
            await self._apply_status(tenant, TenantStatus(new_status))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Status change for tenant {tenant_id} failed in the database: {e}")
            raise DatabaseError("Could not change tenant status", operation="set_tenant_status") from e
        except Exception:
            await self.db.rollback()
            raise

        return await self.get_tenant(tenant_id)

    async def update_tenant_fields(self, tenant_id: int, fields: TenantUpdate) -> Tenant:
        """
        Patch a tenant's profile.

        A ``status`` among the fields goes through the occupancy transition
        rules instead of being written directly.

        Raises:
            ValidationError: If no fields were supplied
            DuplicateResourceError: If the new email is taken
            TenantNotFoundError: If the tenant does not exist
            InvalidStateError: If a returning tenant's room is full
        """
        changes = {
            key: value
            for key, value in fields.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if not changes:
            raise ValidationError("No fields to update", reason=ValidationError.NO_FIELDS)

        new_status = changes.pop("status", None)

        try:
            tenant = await self._lock_tenant(tenant_id)

            if "email" in changes and changes["email"] != tenant.email:
                await self._ensure_unique(email=changes["email"], exclude_tenant_id=tenant_id)

            for field_name, value in changes.items():
                setattr(tenant, field_name, value)

            if new_status is not None:
                await self._apply_status(tenant, TenantStatus(new_status))

            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateResourceError("Tenant", "email", changes.get("email")) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Update of tenant {tenant_id} failed in the database: {e}")
            raise DatabaseError("Could not update tenant", operation="update_tenant") from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Updated tenant {tenant_id}: {sorted(changes) + (['status'] if new_status else [])}")
        return await self.get_tenant(tenant_id)

    async def delete_tenant(self, tenant_id: int) -> None:
        """
        Delete a tenant with its visitors and their logs, releasing its slot.

        Raises:
            TenantNotFoundError: If the tenant does not exist
        """
        try:
            tenant = await self._lock_tenant(tenant_id)

            if tenant.holds_room_slot:
                await self._release_slot(tenant.room_id)

            visitor_ids = select(Visitor.visitor_id).where(Visitor.tenant_id == tenant_id)
            await self.db.execute(delete(VisitorLog).where(VisitorLog.visitor_id.in_(visitor_ids)))
            await self.db.execute(delete(Visitor).where(Visitor.tenant_id == tenant_id))
            await self.db.delete(tenant)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Deletion of tenant {tenant_id} failed in the database: {e}")
            raise DatabaseError("Could not delete tenant", operation="delete_tenant") from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Deleted tenant {tenant_id}")

    # ============== Internals ==============

    async def _lock_tenant(self, tenant_id: int) -> Tenant:
        result = await self.db.execute(
            select(Tenant)
            .where(Tenant.tenant_id == tenant_id)
            .with_for_update(of=Tenant)
            .execution_options(populate_existing=True)
        )
        tenant = result.unique().scalar_one_or_none()
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    async def _apply_status(self, tenant: Tenant, new_status: TenantStatus) -> None:
        current = TenantStatus(tenant.status)
        if current == new_status:
            return

        if tenant.room_id is not None:
            if current == TenantStatus.ACTIVE and new_status == TenantStatus.MOVED_OUT:
                await self._release_slot(tenant.room_id)
            elif current == TenantStatus.MOVED_OUT and new_status == TenantStatus.ACTIVE:
                await self._take_slot(tenant.room_id)

        tenant.status = new_status
        logger.info(f"Tenant {tenant.tenant_id} status: {current.value} -> {new_status.value}")

    async def _take_slot(self, room_id: int) -> None:
        result = await self.db.execute(
            update(Room)
            .where(Room.room_id == room_id, Room.current_occupants < Room.capacity)
            .values(current_occupants=Room.current_occupants + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise self._room_full(room_id)
        logger.debug(f"Room {room_id} occupancy increased")

    async def _release_slot(self, room_id: int) -> None:
        result = await self.db.execute(
            update(Room)
            .where(Room.room_id == room_id, Room.current_occupants > 0)
            .values(current_occupants=Room.current_occupants - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(f"Room {room_id} occupancy already at zero; nothing to release")
        else:
            logger.debug(f"Room {room_id} occupancy decreased")

    async def _ensure_unique(
        self,
        username: str | None = None,
        email: str | None = None,
        exclude_tenant_id: int | None = None,
    ) -> None:
        # Logins resolve staff first, so a tenant may not reuse a staff username
        for model, key in ((Tenant, Tenant.tenant_id), (Admin, Admin.admin_id)):
            conditions = []
            if username:
                conditions.append(model.username == username)
            if email:
                conditions.append(model.email == email)
            if not conditions:
                continue

            query = select(model.username, model.email).where(or_(*conditions))
            if model is Tenant and exclude_tenant_id is not None:
                query = query.where(key != exclude_tenant_id)

            existing = (await self.db.execute(query)).first()
            if existing is None:
                continue
            if username and existing.username == username:
                raise DuplicateResourceError("Account", "username", username)
            raise DuplicateResourceError("Account", "email", email)

    @staticmethod
    def _room_full(room_id: int) -> InvalidStateError:
        return InvalidStateError(
            "Room is at full capacity",
            reason=InvalidStateError.ROOM_FULL,
            details={"room_id": room_id},
        )
