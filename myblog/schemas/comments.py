from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from ..models.comment import CONTENT_MAX_LENGTH
from .posts import AuthorResponse


class CommentCreate(BaseModel):
    content: str = Field(max_length=CONTENT_MAX_LENGTH)
    parent_id: Optional[int] = None


class CommentUpdate(BaseModel):
    content: str = Field(max_length=CONTENT_MAX_LENGTH)


class MentionPart(BaseModel):
    text: str
    nickname: Optional[str] = None


class CommentResponse(BaseModel):
    id: int
    post_id: int
    parent_id: Optional[int] = None
    user_id: int
    body: str
    parts: List[MentionPart] = []
    likes_count: int = 0
    is_deleted: bool = False
    is_edited: bool = False
    can_reply: bool = True
    reply_parent_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    time_ago: Optional[str] = None
    author: AuthorResponse


class CommentThreadResponse(BaseModel):
    comment: CommentResponse
    replies: List[CommentResponse] = []


class CommentPageResponse(BaseModel):
    threads: List[CommentThreadResponse]
    page: int
    page_size: int
    total: int
    has_more: bool
