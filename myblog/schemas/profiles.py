from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from ..models.profile import BIO_MAX_LENGTH, NICKNAME_MAX_LENGTH


class ProfileUpdate(BaseModel):
    nickname: Optional[str] = Field(default=None, min_length=1, max_length=NICKNAME_MAX_LENGTH)
    bio: Optional[str] = Field(default=None, max_length=BIO_MAX_LENGTH)
    avatar_url: Optional[str] = None
    email_public: Optional[bool] = None


class ProfileResponse(BaseModel):
    id: int
    nickname: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    email_public: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileStatsResponse(BaseModel):
    post_count: int
    total_likes: int
