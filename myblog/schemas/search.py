from pydantic import BaseModel
from typing import List, Optional

from .posts import PostResponse


class HighlightSpan(BaseModel):
    text: str
    matched: bool


class PostSearchHit(BaseModel):
    post: PostResponse
    title_spans: List[HighlightSpan]
    excerpt: str


class ProfileSearchHit(BaseModel):
    id: int
    nickname: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    nickname_spans: List[HighlightSpan]


class SearchResponse(BaseModel):
    query: str
    posts: List[PostSearchHit]
    profiles: List[ProfileSearchHit]
