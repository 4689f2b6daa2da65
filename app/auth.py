from dataclasses import dataclass
from datetime import datetime, timedelta
from jose import JWTError, jwt, ExpiredSignatureError
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from typing import Callable, Optional
from app.constants.roles import RoleName, has_role
from app.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError, TokenExpiredError
from .constants import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
import logging

# Initialize logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer scheme; missing tokens are reported by get_current_identity
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Decoded identity assertion carried by every authenticated request."""

    user_id: int
    username: str
    role: RoleName
    full_name: str

    def has_role(self, role: RoleName) -> bool:
        return has_role(self.role, role)

    def to_claims(self) -> dict:
        return {
            "sub": self.username,
            "userId": self.user_id,
            "username": self.username,
            "role": self.role.value,
            "fullName": self.full_name,
        }


# Function to hash a password
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Function to verify a password
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# Function to create an access token with an expiration time
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (username) in token data.")

    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def create_identity_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(identity.to_claims(), expires_delta=expires_delta)


# Function to decode an access token into an Identity
def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Token expired")
        raise TokenExpiredError()
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        raise InvalidTokenError()

    try:
        return Identity(
            user_id=int(payload["userId"]),
            username=payload["username"],
            role=RoleName.from_claim(payload["role"]),
            full_name=payload.get("fullName") or payload["username"],
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Token carries malformed identity claims: {e}")
        raise InvalidTokenError("Token does not carry a valid identity")


async def get_current_identity(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    """
    Resolve the caller's identity from the bearer token.

    The token is trusted once its signature and expiry verify; no database
    round trip is made.

    Raises:
        AuthenticationError: If no token is presented
        TokenExpiredError: If the token has expired
        InvalidTokenError: If the token is malformed or forged
    """
    if not token:
        raise AuthenticationError("Access denied. No token provided.")

    identity = decode_access_token(token)
    request.state.user_id = identity.user_id
    request.state.role = identity.role.value
    logger.debug(f"Authenticated {identity.role.value} '{identity.username}' (id={identity.user_id})")
    return identity


# Dependency factory gating a route on one or more roles
def require_roles(*required_roles: RoleName) -> Callable[..., Identity]:
    async def _identity_with_role(identity: Identity = Depends(get_current_identity)) -> Identity:
        """
        Verify the current identity holds at least one of the required roles.

        Returns:
            Identity: The authenticated caller.

        Raises:
            AuthorizationError: If the role is not allowed here.
        """
        if not any(identity.has_role(role) for role in required_roles):
            names = ", ".join(role.value for role in required_roles)
            logger.warning(f"Role '{identity.role.value}' denied; requires one of: {names}")
            raise AuthorizationError(
                message=f"Access denied. {names.title()} privileges required.",
                required_role=names,
            )
        return identity

    return _identity_with_role


require_admin = require_roles(RoleName.ADMIN)
require_helpdesk = require_roles(RoleName.HELPDESK)
require_tenant = require_roles(RoleName.TENANT)
