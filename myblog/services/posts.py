"""
Post composing, editing and detail loading.
"""
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from ..datastore import AsyncDataStore, Result
from ..datastore.errors import UNIQUE_VIOLATION
from ..logging_config import client_logger
from ..models.post import TITLE_MAX_LENGTH
from .records import PostCard, author_for, load_authors
from .slugify import parse_tags, slugify, with_random_suffix


class PostValidationError(ValueError):
    pass


def clean_tags(tags: Union[str, List[str], None]) -> List[str]:
    """Parse tag input. Input that is not blank but yields no tags is rejected."""
    text = ",".join(tags) if isinstance(tags, list) else tags
    parsed = parse_tags(text)
    if text and not parsed:
        raise PostValidationError("Enter tags separated by commas.")
    return parsed


def validate_post(title: Optional[str], content: Optional[str]) -> tuple:
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise PostValidationError("Both a title and content are required.")
    if len(title) > TITLE_MAX_LENGTH:
        raise PostValidationError(f"Titles can be at most {TITLE_MAX_LENGTH} characters.")
    return title, content


async def _write_with_slug(write, record: Dict[str, Any], slug: Optional[str]) -> Result:
    """Run ``write`` with the slug, then a suffixed slug, then no slug at all."""
    candidates = [slug, with_random_suffix(slug), None] if slug else [None]
    result = None
    for candidate in candidates:
        result = await write({**record, "slug": candidate})
        if not result.error or result.error.code != UNIQUE_VIOLATION:
            return result
        client_logger.info("slug already taken", slug=candidate)
    return result


async def create_post(
    store: AsyncDataStore,
    author_id: int,
    title: str,
    content: str,
    tags: Union[str, List[str], None] = None,
    is_public: bool = True,
    thumbnail_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Validate and store a new post. Raises PostValidationError or StoreError."""
    title, content = validate_post(title, content)
    record = {
        "author_id": author_id,
        "title": title,
        "content": content,
        "tags": clean_tags(tags),
        "is_public": is_public,
        "thumbnail_url": thumbnail_url or None,
    }

    async def insert(values):
        return await store.insert("posts", values)

    result = await _write_with_slug(insert, record, slugify(title) or None)
    row = result.unwrap()[0]
    client_logger.info("post created", post_id=row["id"], author_id=author_id)
    return row


async def update_post(store: AsyncDataStore, post: PostCard, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Apply an edit. Only the keys present in ``changes`` are touched."""
    title, content = validate_post(changes.get("title", post.title), changes.get("content", post.content))
    patch: Dict[str, Any] = {"title": title, "content": content}
    if "tags" in changes:
        patch["tags"] = clean_tags(changes["tags"])
    if "is_public" in changes and changes["is_public"] is not None:
        patch["is_public"] = changes["is_public"]
    if "thumbnail_url" in changes:
        patch["thumbnail_url"] = changes["thumbnail_url"] or None
    patch["updated_at"] = datetime.now(timezone.utc)

    async def write(values):
        return await store.update("posts", values, {"id": post.id})

    result = await _write_with_slug(write, patch, slugify(title) or None)
    return result.unwrap()[0]


async def load_post(store: AsyncDataStore, post_id: int) -> Optional[PostCard]:
    """Fetch a post with its author, or None when it does not exist."""
    result = await store.select_single("posts", {"id": post_id}, required=False)
    row = result.unwrap()
    if row is None:
        return None
    authors = await load_authors(store, [row["author_id"]])
    return PostCard.from_row(row, author_for(authors, row["author_id"]))


async def record_view(store: AsyncDataStore, post: PostCard) -> PostCard:
    """Count one view. A failed update keeps the old count."""
    result = await store.update("posts", {"views": post.views + 1}, {"id": post.id})
    if result.error or not result.data:
        client_logger.warning("view count update failed", post_id=post.id)
        return post
    return replace(post, views=result.data[0]["views"])


async def delete_post(store: AsyncDataStore, post_id: int) -> None:
    (await store.delete("posts", {"id": post_id})).unwrap()
    client_logger.info("post deleted", post_id=post_id)
