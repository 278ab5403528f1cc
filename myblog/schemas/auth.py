from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from ..models.profile import BIO_MAX_LENGTH, NICKNAME_MAX_LENGTH


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    nickname: str = Field(min_length=1, max_length=NICKNAME_MAX_LENGTH)
    bio: Optional[str] = Field(default=None, max_length=BIO_MAX_LENGTH)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    remember_me: bool = False


class RefreshRequest(BaseModel):
    """Request to refresh tokens."""
    refresh_token: str


class UserResponse(BaseModel):
    id: int
    email: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Response with both access and refresh tokens."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: Optional[datetime] = None


class SignupResponse(BaseModel):
    user: UserResponse
    tokens: TokenResponse
