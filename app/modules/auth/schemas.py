from pydantic import Field
from typing import Optional

from app.core.schemas import ApiModel, NormalizedEmail
from app.modules.auth.models import TOKEN_TYPE


class LoginRequest(ApiModel):
    email: NormalizedEmail
    password: str = Field(..., min_length=1)


class TokenResponse(ApiModel):
    message: str
    token: str
    token_type: str = TOKEN_TYPE


class RegisterRequest(ApiModel):
    email: NormalizedEmail
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterResponse(ApiModel):
    message: str
    user_id: str


class Identity(ApiModel):
    """The authenticated caller, as carried by the session token."""
    uid: str
    email: Optional[str] = None
    username: Optional[str] = None
