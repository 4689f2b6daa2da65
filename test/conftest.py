"""
Pytest configuration and fixtures for DormGuard tests
"""

import os
import sys
import tempfile
from collections.abc import AsyncGenerator
from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

# Import Base first, before importing the app
from app.auth import Identity, create_identity_token, hash_password
from app.constants.roles import RoleName, StaffRole
from app.database import Base, get_db
from app.models.admin import Admin
from app.models.room import Room
from app.schemas.tenant import TenantCreate
from app.services.tenant_service import TenantService

# File-backed SQLite by default so every session gets its own connection;
# TEST_DATABASE_URL points the suite at PostgreSQL
_TEST_DB_DIR = tempfile.mkdtemp(prefix="dormguard-test-")
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'dormguard_test.db')}"  # noqa: PTH118
)


def make_engine(url: str):
    if url.startswith("sqlite"):
        engine = create_async_engine(url, connect_args={"check_same_thread": False, "timeout": 30})

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_async_engine(url, pool_pre_ping=True)


test_engine = make_engine(TEST_DATABASE_URL)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

# Now import the app and route its sessions to the test database
from main import app  # noqa: E402
from app.middleware.rate_limit import limiter  # noqa: E402

limiter.enabled = False

ADMIN_PASSWORD = "adminpass"
HELPDESK_PASSWORD = "deskpass"
TENANT_PASSWORD = "tenantpass"


async def override_get_db():
    async with TestSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
async def setup_test_database():
    """Create a fresh schema for each test that needs the database."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections belong to this test's event loop
    await test_engine.dispose()


@pytest.fixture(scope="function")
async def test_db(setup_test_database) -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
async def async_client(setup_test_database) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def future_date() -> date:
    """A visit date comfortably beyond the advance notice window."""
    return date.today() + timedelta(days=3)


# ============== Records ==============


@pytest.fixture
def make_room(test_db: AsyncSession):
    async def _make_room(room_number: str = "101", capacity: int = 2, building: str = "North Hall") -> Room:
        room = Room(room_number=room_number, building=building, capacity=capacity, current_occupants=0)
        test_db.add(room)
        await test_db.commit()
        await test_db.refresh(room)
        return room

    return _make_room


@pytest.fixture
def make_tenant(test_db: AsyncSession):
    counter = {"n": 0}

    async def _make_tenant(room_id: int, username: str | None = None, **fields):
        counter["n"] += 1
        username = username or f"tenant{counter['n']}"
        data = TenantCreate(
            username=username,
            password=TENANT_PASSWORD,
            full_name=fields.pop("full_name", f"Tenant {counter['n']}"),
            email=fields.pop("email", f"{username}@dorm.example.com"),
            contact_number=fields.pop("contact_number", "555-0100"),
            room_id=room_id,
            **fields,
        )
        return await TenantService(test_db).register_tenant(data)

    return _make_tenant


@pytest.fixture
async def room(make_room) -> Room:
    return await make_room("101", capacity=2)


@pytest.fixture
async def tenant(make_tenant, room):
    return await make_tenant(room.room_id, username="alice", full_name="Alice Resident")


async def _make_staff(db: AsyncSession, username: str, password: str, role: StaffRole, full_name: str) -> Admin:
    staff = Admin(
        username=username,
        password=hash_password(password),
        full_name=full_name,
        email=f"{username}@dorm.example.com",
        role=role,
    )
    db.add(staff)
    await db.commit()
    await db.refresh(staff)
    return staff


@pytest.fixture
async def admin(test_db: AsyncSession) -> Admin:
    return await _make_staff(test_db, "warden", ADMIN_PASSWORD, StaffRole.ADMIN, "Wendy Warden")


@pytest.fixture
async def helpdesk(test_db: AsyncSession) -> Admin:
    return await _make_staff(test_db, "desk", HELPDESK_PASSWORD, StaffRole.HELPDESK, "Dana Desk")


# ============== Identities ==============


@pytest.fixture
def admin_identity(admin) -> Identity:
    return Identity(user_id=admin.admin_id, username=admin.username, role=RoleName.ADMIN, full_name=admin.full_name)


@pytest.fixture
def helpdesk_identity(helpdesk) -> Identity:
    return Identity(
        user_id=helpdesk.admin_id, username=helpdesk.username, role=RoleName.HELPDESK, full_name=helpdesk.full_name
    )


@pytest.fixture
def tenant_identity(tenant) -> Identity:
    return Identity(user_id=tenant.tenant_id, username=tenant.username, role=RoleName.TENANT, full_name=tenant.full_name)


def bearer(identity: Identity) -> dict:
    return {"Authorization": f"Bearer {create_identity_token(identity)}"}


@pytest.fixture
def headers_for():
    """Build bearer headers for an arbitrary identity."""
    return bearer


@pytest.fixture
def admin_headers(admin_identity) -> dict:
    return bearer(admin_identity)


@pytest.fixture
def helpdesk_headers(helpdesk_identity) -> dict:
    return bearer(helpdesk_identity)


@pytest.fixture
def tenant_headers(tenant_identity) -> dict:
    return bearer(tenant_identity)
