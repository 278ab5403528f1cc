"""
Typed composite records: posts and comments joined with their author profile.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..datastore import AsyncDataStore
from ..logging_config import client_logger

UNKNOWN_AUTHOR = "Unknown"
DELETED_PLACEHOLDER = "This comment has been deleted."

# Writes within this window of creation do not count as edits
EDIT_TOLERANCE = timedelta(seconds=1)


@dataclass(frozen=True)
class AuthorProfile:
    id: Optional[int]
    nickname: str
    avatar_url: Optional[str] = None

    @classmethod
    def unknown(cls, user_id: Optional[int] = None) -> "AuthorProfile":
        return cls(id=user_id, nickname=UNKNOWN_AUTHOR, avatar_url=None)


@dataclass(frozen=True)
class PostCard:
    id: int
    title: str
    content: str
    author_id: int
    slug: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    is_public: bool = True
    views: int = 0
    likes_count: int = 0
    comments_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: AuthorProfile = field(default_factory=AuthorProfile.unknown)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], author: Optional[AuthorProfile] = None) -> "PostCard":
        return cls(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            author_id=row["author_id"],
            slug=row.get("slug"),
            thumbnail_url=row.get("thumbnail_url"),
            tags=list(row.get("tags") or []),
            is_public=bool(row.get("is_public", True)),
            views=row.get("views") or 0,
            likes_count=row.get("likes_count") or 0,
            comments_count=row.get("comments_count") or 0,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            author=author or AuthorProfile.unknown(row["author_id"]),
        )


@dataclass(frozen=True)
class CommentView:
    id: int
    post_id: int
    user_id: int
    content: str
    parent_id: Optional[int] = None
    likes_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    author: AuthorProfile = field(default_factory=AuthorProfile.unknown)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], author: Optional[AuthorProfile] = None) -> "CommentView":
        return cls(
            id=row["id"],
            post_id=row["post_id"],
            user_id=row["user_id"],
            content=row["content"],
            parent_id=row.get("parent_id"),
            likes_count=row.get("likes_count") or 0,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            deleted_at=row.get("deleted_at"),
            author=author or AuthorProfile.unknown(row["user_id"]),
        )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @property
    def is_edited(self) -> bool:
        if self.is_deleted or self.created_at is None or self.updated_at is None:
            return False
        return self.updated_at - self.created_at > EDIT_TOLERANCE

    @property
    def can_reply(self) -> bool:
        return not self.is_deleted

    @property
    def reply_parent_id(self) -> int:
        """Parent id for a new reply, always a top-level comment."""
        return self.parent_id if self.parent_id is not None else self.id

    def render_body(self) -> str:
        return DELETED_PLACEHOLDER if self.is_deleted else self.content

    def with_author(self, author: AuthorProfile) -> "CommentView":
        return replace(self, author=author)


async def load_authors(store: AsyncDataStore, user_ids: Iterable[int]) -> Dict[int, AuthorProfile]:
    """Fetch author profiles for a batch of ids. Failures degrade to placeholders."""
    ids = sorted({uid for uid in user_ids if uid is not None})
    if not ids:
        return {}
    result = await store.select(
        "profiles",
        filters={"id": ("in", ids)},
        columns=["id", "nickname", "avatar_url"],
    )
    if result.error:
        client_logger.warning("author lookup failed", code=result.error.code, count=len(ids))
        return {}
    return {
        row["id"]: AuthorProfile(id=row["id"], nickname=row["nickname"], avatar_url=row["avatar_url"])
        for row in result.data
    }


def author_for(authors: Mapping[int, AuthorProfile], user_id: int) -> AuthorProfile:
    return authors.get(user_id) or AuthorProfile.unknown(user_id)


async def attach_post_authors(store: AsyncDataStore, rows: List[Mapping[str, Any]]) -> List[PostCard]:
    authors = await load_authors(store, (row["author_id"] for row in rows))
    return [PostCard.from_row(row, author_for(authors, row["author_id"])) for row in rows]


async def attach_comment_authors(store: AsyncDataStore, rows: List[Mapping[str, Any]]) -> List[CommentView]:
    authors = await load_authors(store, (row["user_id"] for row in rows))
    return [CommentView.from_row(row, author_for(authors, row["user_id"])) for row in rows]
