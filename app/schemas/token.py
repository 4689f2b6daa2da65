from pydantic import BaseModel, Field
from typing import Optional

from app.constants.roles import RoleName


class AuthUser(BaseModel):
    user_id: int = Field(..., description="Staff or tenant id, depending on role.")
    username: str
    full_name: str
    role: RoleName
    email: Optional[str] = None


class Token(BaseModel):
    access_token: str = Field(..., min_length=32, description="Access token string.")
    token_type: str = Field("Bearer", pattern="^Bearer$", description="Type of the token, always 'Bearer'.")
    expires_in: Optional[int] = Field(None, description="Time in seconds before token expires.")
    user: AuthUser
