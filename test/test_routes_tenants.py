"""
Tests for tenant management and admin endpoints.
"""

import pytest


def tenant_payload(room_id, username, **overrides):
    payload = {
        "username": username,
        "password": "secret123",
        "full_name": username.title(),
        "email": f"{username}@dorm.example.com",
        "contact_number": "555-0199",
        "room_id": room_id,
    }
    payload.update(overrides)
    return payload


async def room_occupancy(client, headers, room_id):
    rooms = (await client.get("/api/admin/rooms", headers=headers)).json()
    return next(r["current_occupants"] for r in rooms if r["room_id"] == room_id)


class TestTenantCrud:
    async def test_create_and_list(self, async_client, admin_headers, room):
        response = await async_client.post("/api/tenants", json=tenant_payload(room.room_id, "bob"), headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "Active"
        assert body["room_number"] == "101"
        assert body["room_current_occupants"] == 1
        assert "password" not in body

        listing = await async_client.get("/api/tenants", headers=admin_headers)
        assert [t["username"] for t in listing.json()] == ["bob"]

    async def test_room_full_envelope(self, async_client, admin_headers, make_room):
        room = await make_room("102", capacity=1)
        await async_client.post("/api/admin/create-tenant", json=tenant_payload(room.room_id, "first"), headers=admin_headers)

        response = await async_client.post(
            "/api/admin/create-tenant", json=tenant_payload(room.room_id, "second"), headers=admin_headers
        )

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["error_code"] == "STATE_ROOM_FULL"
        assert error["details"]["reason"] == "RoomFull"
        assert error["path"] == "/api/admin/create-tenant"
        assert await room_occupancy(async_client, admin_headers, room.room_id) == 1

    async def test_schema_rejects_bad_payload(self, async_client, admin_headers, room):
        response = await async_client.post(
            "/api/tenants", json=tenant_payload(room.room_id, "bob", email="not-an-email"), headers=admin_headers
        )

        assert response.status_code == 422
        fields = [e["field"] for e in response.json()["error"]["details"]["validation_errors"]]
        assert "email" in fields

    @pytest.mark.parametrize("email", ["bob@dorm.test", "bob@localhost"])
    async def test_reserved_email_domains_are_refused(self, async_client, admin_headers, room, email):
        response = await async_client.post(
            "/api/tenants", json=tenant_payload(room.room_id, "bob", email=email), headers=admin_headers
        )

        assert response.status_code == 422

    async def test_get_by_any_authenticated_caller(self, async_client, tenant, helpdesk_headers):
        response = await async_client.get(f"/api/tenants/{tenant.tenant_id}", headers=helpdesk_headers)

        assert response.status_code == 200
        assert response.json()["full_name"] == "Alice Resident"

    async def test_get_missing(self, async_client, admin_headers):
        response = await async_client.get("/api/tenants/999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_TENANT_NOT_FOUND"

    async def test_update_status_moves_occupancy(self, async_client, admin_headers, tenant, room):
        response = await async_client.put(
            f"/api/tenants/{tenant.tenant_id}", json={"status": "Moved Out"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Moved Out"
        assert response.json()["room_current_occupants"] == 0

    async def test_update_rejects_room_change(self, async_client, admin_headers, tenant):
        response = await async_client.put(f"/api/tenants/{tenant.tenant_id}", json={"room_id": 5}, headers=admin_headers)

        assert response.status_code == 422

    async def test_update_empty(self, async_client, admin_headers, tenant):
        response = await async_client.put(f"/api/tenants/{tenant.tenant_id}", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "VALIDATION_NO_FIELDS"

    async def test_delete(self, async_client, admin_headers, tenant, room):
        response = await async_client.delete(f"/api/tenants/{tenant.tenant_id}", headers=admin_headers)

        assert response.json() == {"message": "Tenant deleted successfully", "tenant_id": tenant.tenant_id}
        assert await room_occupancy(async_client, admin_headers, room.room_id) == 0


class TestAdminOnly:
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/tenants"),
            ("get", "/api/admin/rooms"),
            ("get", "/api/admin/dashboard-stats"),
            ("delete", "/api/tenants/1"),
        ],
    )
    async def test_helpdesk_and_tenant_are_forbidden(self, async_client, helpdesk_headers, tenant_headers, method, path):
        for headers in (helpdesk_headers, tenant_headers):
            response = await getattr(async_client, method)(path, headers=headers)
            assert response.status_code == 403
            assert response.json()["error"]["error_code"] == "AUTH_PERMISSION_DENIED"

    async def test_anonymous_is_unauthorized(self, async_client):
        response = await async_client.get("/api/tenants")

        assert response.status_code == 401


class TestTenantPortal:
    async def test_profile(self, async_client, tenant_headers):
        response = await async_client.get("/api/tenant/profile", headers=tenant_headers)

        assert response.json()["username"] == "alice"

    async def test_staff_have_no_portal(self, async_client, admin_headers):
        response = await async_client.get("/api/tenant/profile", headers=admin_headers)

        assert response.status_code == 403


class TestDashboard:
    async def test_counters(self, async_client, admin_headers, tenant, future_date):
        await async_client.post(
            "/api/visitors",
            json={"tenant_id": tenant.tenant_id, "full_name": "Gus", "purpose": "Visit", "expected_date": future_date.isoformat()},
            headers=admin_headers,
        )

        response = await async_client.get("/api/admin/dashboard-stats", headers=admin_headers)

        assert response.json() == {
            "active_tenants": 1,
            "pending_approvals": 1,
            "active_visitors": 0,
            "today_visitors": 0,
        }


class TestHealth:
    async def test_health(self, async_client):
        response = await async_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
