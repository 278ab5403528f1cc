"""
Post routes: public feed, detail, composing, editing and likes.
"""
from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from ..auth import ensure_owner, get_current_user, get_required_user
from ..config import get_settings
from ..datastore import AsyncDataStore, StoreError, get_store
from ..models.user import User
from ..responses import not_found, store_error, store_failure, validation_error
from ..schemas.posts import FeedResponse, LikeResponse, PostCreate, PostResponse, PostUpdate
from ..services.feed_pager import LATEST, fetch_public_posts
from ..services.likes import POST_LIKES, LikeError, LikeToggle
from ..services.posts import (
    PostValidationError,
    create_post,
    delete_post,
    load_post,
    record_view,
    update_post,
)
from ..services.records import PostCard

settings = get_settings()

router = APIRouter(prefix="/api/posts", tags=["posts"])


def post_to_dict(post: PostCard) -> dict:
    """Convert a PostCard to a dictionary response."""
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "slug": post.slug,
        "thumbnail_url": post.thumbnail_url,
        "tags": post.tags,
        "is_public": post.is_public,
        "author_id": post.author_id,
        "views": post.views,
        "likes_count": post.likes_count,
        "comments_count": post.comments_count,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
        "author": {
            "id": post.author.id,
            "nickname": post.author.nickname,
            "avatar_url": post.author.avatar_url,
        },
    }


async def get_visible_post(store: AsyncDataStore, post_id: int, current_user: Optional[User]) -> PostCard:
    """Load a post the caller may see. Private posts of other authors look missing."""
    try:
        post = await load_post(store, post_id)
    except StoreError as e:
        store_error(e, "load the post", "Post")
    if post is None:
        not_found("Post", post_id)
    if not post.is_public and (current_user is None or current_user.id != post.author_id):
        not_found("Post", post_id)
    return post


async def get_own_post(store: AsyncDataStore, post_id: int, current_user: User) -> PostCard:
    post = await get_visible_post(store, post_id, current_user)
    ensure_owner(post.author_id, current_user, "post")
    return post


@router.get("", response_model=FeedResponse)
async def get_feed(
    sort: str = Query(LATEST, pattern="^(latest|popular)$"),
    page: int = Query(0, ge=0),
    store: AsyncDataStore = Depends(get_store),
):
    """One page of the public feed."""
    page_size = settings.feed_page_size
    try:
        posts = await fetch_public_posts(store, page, sort, page_size)
    except StoreError as e:
        store_error(e, "load posts")
    return {
        "items": [post_to_dict(p) for p in posts],
        "page": page,
        "page_size": page_size,
        "sort": sort,
        "has_more": len(posts) == page_size,
    }


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    store: AsyncDataStore = Depends(get_store),
    current_user: Optional[User] = Depends(get_current_user),
):
    """Get a post and count the view."""
    post = await get_visible_post(store, post_id, current_user)
    post = await record_view(store, post)
    return post_to_dict(post)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def compose_post(
    payload: PostCreate,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Publish a new post."""
    try:
        row = await create_post(
            store,
            current_user.id,
            payload.title,
            payload.content,
            tags=payload.tags,
            is_public=payload.is_public,
            thumbnail_url=payload.thumbnail_url,
        )
        post = await load_post(store, row["id"])
    except PostValidationError as e:
        validation_error(str(e))
    except StoreError as e:
        store_error(e, "create the post", "Post")
    return post_to_dict(post)


@router.patch("/{post_id}", response_model=PostResponse)
async def edit_post(
    post_id: int,
    payload: PostUpdate,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Edit a post. Only its author may do this."""
    post = await get_own_post(store, post_id, current_user)
    try:
        await update_post(store, post, payload.model_dump(exclude_unset=True))
        post = await load_post(store, post_id)
    except PostValidationError as e:
        validation_error(str(e))
    except StoreError as e:
        store_error(e, "update the post", "Post")
    return post_to_dict(post)


@router.delete("/{post_id}")
async def remove_post(
    post_id: int,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Delete a post with its comments and likes."""
    await get_own_post(store, post_id, current_user)
    try:
        await delete_post(store, post_id)
    except StoreError as e:
        store_error(e, "delete the post", "Post")
    return {"message": "Post deleted successfully"}


@router.get("/{post_id}/like", response_model=LikeResponse)
async def get_like_state(
    post_id: int,
    store: AsyncDataStore = Depends(get_store),
    current_user: Optional[User] = Depends(get_current_user),
):
    post = await get_visible_post(store, post_id, current_user)
    toggle = LikeToggle(store, POST_LIKES, post.id, current_user.id if current_user else None, post.likes_count)
    await toggle.load()
    return {"liked": toggle.liked, "likes_count": toggle.count}


@router.post("/{post_id}/like", response_model=LikeResponse)
async def toggle_post_like(
    post_id: int,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Like the post, or take the like back if it is already liked."""
    post = await get_visible_post(store, post_id, current_user)
    toggle = LikeToggle(store, POST_LIKES, post.id, current_user.id, post.likes_count)
    await toggle.load()
    try:
        outcome = await toggle.toggle()
    except LikeError as e:
        store_failure(e.message, {"code": e.code})
    return {"liked": outcome.liked, "likes_count": outcome.count, "notice": outcome.notice}
