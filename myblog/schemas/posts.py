from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import datetime

from ..models.post import TITLE_MAX_LENGTH


class AuthorResponse(BaseModel):
    id: Optional[int] = None
    nickname: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class PostCreate(BaseModel):
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    content: str
    # Either a list or the comma separated text typed into the composer
    tags: Union[List[str], str, None] = None
    is_public: bool = True
    thumbnail_url: Optional[str] = None


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = None
    tags: Union[List[str], str, None] = None
    is_public: Optional[bool] = None
    thumbnail_url: Optional[str] = None


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    slug: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: List[str] = []
    is_public: bool
    author_id: int
    views: int = 0
    likes_count: int = 0
    comments_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[AuthorResponse] = None

    class Config:
        from_attributes = True


class FeedResponse(BaseModel):
    items: List[PostResponse]
    page: int
    page_size: int
    sort: str
    has_more: bool


class LikeResponse(BaseModel):
    liked: bool
    likes_count: int
    notice: Optional[str] = None
