"""
Writing, editing and soft-deleting comments.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..datastore import AsyncDataStore
from ..logging_config import client_logger
from ..models.comment import CONTENT_MAX_LENGTH
from .records import CommentView, author_for, load_authors


class CommentValidationError(ValueError):
    pass


def validate_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise CommentValidationError("Write something before posting.")
    if len(content) > CONTENT_MAX_LENGTH:
        raise CommentValidationError(f"Comments can be at most {CONTENT_MAX_LENGTH} characters.")
    return content


async def load_comment(store: AsyncDataStore, comment_id: int) -> Optional[CommentView]:
    row = (await store.select_single("comments", {"id": comment_id}, required=False)).unwrap()
    if row is None:
        return None
    authors = await load_authors(store, [row["user_id"]])
    return CommentView.from_row(row, author_for(authors, row["user_id"]))


async def resolve_reply_parent(store: AsyncDataStore, post_id: int, parent_id: int) -> int:
    """Return the top-level comment a reply should hang from.

    Replying to a reply anchors the new comment on that reply's parent, so
    threads never nest deeper than one level.
    """
    parent = await load_comment(store, parent_id)
    if parent is None or parent.post_id != post_id:
        raise CommentValidationError("The comment you are replying to does not exist.")
    if not parent.can_reply:
        raise CommentValidationError("Deleted comments cannot be replied to.")
    return parent.reply_parent_id


async def create_comment(
    store: AsyncDataStore,
    post_id: int,
    user_id: int,
    content: str,
    parent_id: Optional[int] = None,
) -> CommentView:
    content = validate_content(content)
    record: Dict[str, Any] = {"post_id": post_id, "user_id": user_id, "content": content}
    if parent_id is not None:
        record["parent_id"] = await resolve_reply_parent(store, post_id, parent_id)

    row = (await store.insert("comments", record)).unwrap()[0]
    client_logger.info("comment added", comment_id=row["id"], post_id=post_id, reply=parent_id is not None)
    authors = await load_authors(store, [user_id])
    return CommentView.from_row(row, author_for(authors, user_id))


async def edit_comment(store: AsyncDataStore, comment: CommentView, content: str) -> CommentView:
    if comment.is_deleted:
        raise CommentValidationError("Deleted comments cannot be edited.")
    content = validate_content(content)
    patch = {"content": content, "updated_at": datetime.now(timezone.utc)}
    row = (await store.update("comments", patch, {"id": comment.id})).unwrap()[0]
    return CommentView.from_row(row, comment.author)


async def soft_delete_comment(store: AsyncDataStore, comment: CommentView) -> CommentView:
    """Tombstone the comment. The row stays so its replies keep their anchor."""
    if comment.is_deleted:
        return comment
    patch = {"deleted_at": datetime.now(timezone.utc)}
    row = (await store.update("comments", patch, {"id": comment.id})).unwrap()[0]
    client_logger.info("comment deleted", comment_id=comment.id)
    return CommentView.from_row(row, comment.author)
