"""
Comment routes: threaded listing, replies, edits, soft deletes and likes.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from ..auth import ensure_owner, get_current_user, get_required_user
from ..config import get_settings
from ..datastore import AsyncDataStore, StoreError, get_store
from ..models.user import User
from ..responses import not_found, store_error, store_failure, validation_error
from ..schemas.comments import CommentCreate, CommentPageResponse, CommentResponse, CommentUpdate
from ..schemas.posts import LikeResponse
from ..services.comment_pager import fetch_comments
from ..services.comments import (
    CommentValidationError,
    create_comment,
    edit_comment,
    load_comment,
    soft_delete_comment,
)
from ..services.likes import COMMENT_LIKES, LikeError, LikeToggle
from ..services.mentions import parse_mentions
from ..services.records import CommentView
from ..services.time_ago import time_ago
from .posts import get_visible_post

settings = get_settings()

router = APIRouter(prefix="/api", tags=["comments"])


def comment_to_dict(comment: CommentView, now: Optional[datetime] = None) -> dict:
    """Convert a CommentView to a response. Deleted comments only expose the placeholder."""
    body = comment.render_body()
    parts = [] if comment.is_deleted else [
        {"text": part.text, "nickname": part.nickname} for part in parse_mentions(comment.content)
    ]
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "parent_id": comment.parent_id,
        "user_id": comment.user_id,
        "body": body,
        "parts": parts,
        "likes_count": comment.likes_count,
        "is_deleted": comment.is_deleted,
        "is_edited": comment.is_edited,
        "can_reply": comment.can_reply,
        "reply_parent_id": comment.reply_parent_id,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
        "time_ago": time_ago(comment.created_at, now) if comment.created_at else None,
        "author": {
            "id": comment.author.id,
            "nickname": comment.author.nickname,
            "avatar_url": comment.author.avatar_url,
        },
    }


async def get_comment(store: AsyncDataStore, comment_id: int) -> CommentView:
    try:
        comment = await load_comment(store, comment_id)
    except StoreError as e:
        store_error(e, "load the comment", "Comment")
    if comment is None:
        not_found("Comment", comment_id)
    return comment


@router.get("/posts/{post_id}/comments", response_model=CommentPageResponse)
async def list_comments(
    post_id: int,
    page: int = Query(1, ge=1),
    store: AsyncDataStore = Depends(get_store),
    current_user: Optional[User] = Depends(get_current_user),
):
    """One page of comments, newest first, grouped into threads."""
    await get_visible_post(store, post_id, current_user)
    try:
        result = await fetch_comments(store, post_id, page, settings.comment_page_size)
    except StoreError as e:
        store_error(e, "load comments")

    now = datetime.now(timezone.utc)
    return {
        "threads": [
            {
                "comment": comment_to_dict(thread.comment, now),
                "replies": [comment_to_dict(reply, now) for reply in thread.replies],
            }
            for thread in result.threads
        ],
        "page": result.page,
        "page_size": result.page_size,
        "total": result.total,
        "has_more": result.has_more,
    }


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: int,
    payload: CommentCreate,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Comment on a post, or reply to one of its comments."""
    await get_visible_post(store, post_id, current_user)
    try:
        comment = await create_comment(store, post_id, current_user.id, payload.content, payload.parent_id)
    except CommentValidationError as e:
        validation_error(str(e))
    except StoreError as e:
        store_error(e, "add the comment", "Comment")
    return comment_to_dict(comment)


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    comment = await get_comment(store, comment_id)
    ensure_owner(comment.user_id, current_user, "comment")
    try:
        comment = await edit_comment(store, comment, payload.content)
    except CommentValidationError as e:
        validation_error(str(e))
    except StoreError as e:
        store_error(e, "update the comment", "Comment")
    return comment_to_dict(comment)


@router.delete("/comments/{comment_id}", response_model=CommentResponse)
async def delete_comment(
    comment_id: int,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Soft delete. Replies stay attached and the body shows a placeholder."""
    comment = await get_comment(store, comment_id)
    ensure_owner(comment.user_id, current_user, "comment")
    try:
        comment = await soft_delete_comment(store, comment)
    except StoreError as e:
        store_error(e, "delete the comment", "Comment")
    return comment_to_dict(comment)


@router.post("/comments/{comment_id}/like", response_model=LikeResponse)
async def toggle_comment_like(
    comment_id: int,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    comment = await get_comment(store, comment_id)
    await get_visible_post(store, comment.post_id, current_user)
    if comment.is_deleted:
        validation_error("Deleted comments cannot be liked.")

    toggle = LikeToggle(store, COMMENT_LIKES, comment.id, current_user.id, comment.likes_count)
    await toggle.load()
    try:
        outcome = await toggle.toggle()
    except LikeError as e:
        store_failure(e.message, {"code": e.code})
    return {"liked": outcome.liked, "likes_count": outcome.count, "notice": outcome.notice}
