"""
Tests for authentication: tokens, credential resolution and the auth routes.
"""

import time
from datetime import timedelta

import pytest
from jose import jwt

from app.auth import Identity, create_access_token, create_identity_token, decode_access_token, verify_password
from app.constants import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from app.constants.roles import RoleName, StaffRole
from app.exceptions import DuplicateResourceError, InvalidCredentialsError, InvalidTokenError, TokenExpiredError
from app.schemas.auth import AdminCreate
from app.services import auth_service

from conftest import ADMIN_PASSWORD, HELPDESK_PASSWORD, TENANT_PASSWORD


class TestTokens:
    def test_identity_round_trip(self):
        identity = Identity(user_id=3, username="desk", role=RoleName.HELPDESK, full_name="Dana Desk")

        decoded = decode_access_token(create_identity_token(identity))

        assert decoded == identity

    def test_claims_carry_lowercase_role(self):
        identity = Identity(user_id=1, username="warden", role=RoleName.ADMIN, full_name="Wendy Warden")

        claims = jwt.decode(create_identity_token(identity), SECRET_KEY, algorithms=[ALGORITHM])

        assert claims["role"] == "admin"
        assert claims["userId"] == 1
        assert claims["sub"] == "warden"

    def test_default_lifetime_follows_constant(self):
        identity = Identity(user_id=1, username="warden", role=RoleName.ADMIN, full_name="W")

        claims = jwt.decode(create_identity_token(identity), SECRET_KEY, algorithms=[ALGORITHM])

        assert abs(claims["exp"] - time.time() - ACCESS_TOKEN_EXPIRE_MINUTES * 60) < 60

    def test_expired(self):
        identity = Identity(user_id=1, username="warden", role=RoleName.ADMIN, full_name="W")
        token = create_identity_token(identity, expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenExpiredError):
            decode_access_token(token)

    def test_forged(self):
        token = jwt.encode({"sub": "x", "userId": 1, "username": "x", "role": "admin"}, "wrong-key", algorithm=ALGORITHM)

        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_unknown_role_claim(self):
        token = create_access_token({"sub": "x", "userId": 1, "username": "x", "role": "superuser"})

        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_missing_sub(self):
        with pytest.raises(ValueError):
            create_access_token({"userId": 1})


class TestAuthenticate:
    async def test_admin(self, test_db, admin):
        identity, email = await auth_service.authenticate("warden", ADMIN_PASSWORD, test_db)

        assert identity.role == RoleName.ADMIN
        assert identity.user_id == admin.admin_id
        assert email == "warden@dorm.example.com"

    async def test_helpdesk(self, test_db, helpdesk):
        identity, _ = await auth_service.authenticate("desk", HELPDESK_PASSWORD, test_db)

        assert identity.role == RoleName.HELPDESK

    async def test_tenant(self, test_db, tenant):
        identity, _ = await auth_service.authenticate("alice", TENANT_PASSWORD, test_db)

        assert identity.role == RoleName.TENANT
        assert identity.user_id == tenant.tenant_id
        assert identity.full_name == "Alice Resident"

    @pytest.mark.parametrize("username, password", [("warden", "nope"), ("alice", "nope"), ("ghost", "anything")])
    async def test_bad_credentials(self, test_db, admin, tenant, username, password):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.authenticate(username, password, test_db)

    async def test_register_admin(self, test_db, admin):
        data = AdminCreate(
            username="night",
            password="nightdesk",
            full_name="Night Desk",
            email="night@dorm.example.com",
            role=StaffRole.HELPDESK,
        )

        created = await auth_service.register_admin(data, test_db)

        assert created.role == StaffRole.HELPDESK
        assert verify_password("nightdesk", created.password)

    async def test_register_admin_rejects_tenant_username(self, test_db, tenant):
        with pytest.raises(DuplicateResourceError):
            await auth_service.register_admin(
                AdminCreate(username="alice", password="secret1", full_name="Alice", email="other@dorm.example.com"),
                test_db,
            )


class TestAuthRoutes:
    async def test_login_returns_token_and_user(self, async_client, admin):
        response = await async_client.post("/api/auth/login", json={"username": "warden", "password": ADMIN_PASSWORD})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "Bearer"
        assert body["user"]["role"] == "admin"
        assert body["user"]["email"] == "warden@dorm.example.com"

        me = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.json()["username"] == "warden"

    async def test_login_failure_envelope(self, async_client, tenant):
        response = await async_client.post("/api/auth/login", json={"username": "alice", "password": "wrong"})

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["error_code"] == "AUTH_INVALID_CREDENTIALS"
        assert error["message"] == "Invalid username or password"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_me_requires_token(self, async_client):
        response = await async_client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Access denied. No token provided."

    async def test_garbage_token(self, async_client):
        response = await async_client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "AUTH_TOKEN_INVALID"

    async def test_logout(self, async_client):
        response = await async_client.post("/api/auth/logout")

        assert response.json() == {"message": "Logout successful", "success": True}

    async def test_register_admin_is_admin_only(self, async_client, helpdesk_headers, admin_headers):
        payload = {"username": "second", "password": "second1", "full_name": "Second Admin", "email": "second@dorm.example.com"}

        denied = await async_client.post("/api/auth/register-admin", json=payload, headers=helpdesk_headers)
        created = await async_client.post("/api/auth/register-admin", json=payload, headers=admin_headers)

        assert denied.status_code == 403
        assert created.status_code == 201
        assert created.json()["role"] == "Admin"
        assert "password" not in created.json()
