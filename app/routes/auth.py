from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import timedelta
from ..constants import ACCESS_TOKEN_EXPIRE_MINUTES
from ..auth import Identity, create_identity_token, get_current_identity, require_admin
from ..database import get_db
from ..middleware.rate_limit import LOGIN_RATE_LIMIT, limiter
from ..schemas.auth import AdminCreate, AdminResponse, LoginRequest, LogoutResponse
from ..schemas.token import AuthUser, Token
from ..services import auth_service
import logging

# Initialize logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/login", response_model=Token)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange a username and password for a bearer token.

    Staff accounts are matched before tenants.
    """
    identity, email = await auth_service.authenticate(credentials.username, credentials.password, db)

    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_identity_token(identity, expires_delta=access_token_expires)
    logger.info(f"Access token issued for {identity.role.value} '{identity.username}'")

    return {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": int(access_token_expires.total_seconds()),
        "user": {
            "user_id": identity.user_id,
            "username": identity.username,
            "full_name": identity.full_name,
            "role": identity.role,
            "email": email,
        },
    }


@router.post("/logout", response_model=LogoutResponse)
async def logout():
    # Tokens are stateless; the client discards its copy
    return LogoutResponse()


@router.get("/me", response_model=AuthUser)
async def read_current_identity(identity: Identity = Depends(get_current_identity)):
    return {
        "user_id": identity.user_id,
        "username": identity.username,
        "full_name": identity.full_name,
        "role": identity.role,
    }


@router.post("/register-admin", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def register_admin(
    data: AdminCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    admin = await auth_service.register_admin(data, db)
    logger.info(f"Staff account '{admin.username}' created by '{identity.username}'")
    return admin
