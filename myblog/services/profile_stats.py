"""
Profile summary counts and "my page" post listings.
"""
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping

from ..datastore import AsyncDataStore

MY_POST_FILTERS = ("all", "public", "private")
MY_POST_SORTS = ("latest", "popular", "views")


@dataclass(frozen=True)
class ProfileStats:
    post_count: int = 0
    total_likes: int = 0


def compute_stats(posts: Iterable[Mapping[str, Any]]) -> ProfileStats:
    """Count posts and sum their like counters. A missing counter counts as 0."""
    post_count = 0
    total_likes = 0
    for post in posts:
        post_count += 1
        total_likes += post.get("likes_count") or 0
    return ProfileStats(post_count=post_count, total_likes=total_likes)


async def load_profile_stats(store: AsyncDataStore, user_id: int) -> ProfileStats:
    """Recompute stats from every post the user wrote. Raises StoreError."""
    result = await store.select("posts", filters={"author_id": user_id}, columns=["id", "likes_count"])
    return compute_stats(result.unwrap())


def sort_posts(posts: Iterable[Mapping[str, Any]], sort: str = "latest") -> List[Mapping[str, Any]]:
    if sort not in MY_POST_SORTS:
        raise ValueError(f"Unknown sort '{sort}'")
    posts = list(posts)
    if sort == "latest":
        return sorted(posts, key=lambda p: (p["created_at"], p["id"]), reverse=True)
    if sort == "popular":
        return sorted(posts, key=lambda p: p.get("likes_count") or 0, reverse=True)
    return sorted(posts, key=lambda p: p.get("views") or 0, reverse=True)


async def load_my_posts(
    store: AsyncDataStore,
    user_id: int,
    visibility: str = "all",
    sort: str = "latest",
) -> List[Mapping[str, Any]]:
    if visibility not in MY_POST_FILTERS:
        raise ValueError(f"Unknown filter '{visibility}'")
    filters = {"author_id": user_id}
    if visibility != "all":
        filters["is_public"] = visibility == "public"
    result = await store.select("posts", filters=filters)
    return sort_posts(result.unwrap(), sort)


async def load_liked_posts(store: AsyncDataStore, user_id: int, sort: str = "latest") -> List[Mapping[str, Any]]:
    """Posts the user liked. Private posts of other authors are left out."""
    likes = await store.select("likes", filters={"user_id": user_id}, columns=["post_id"])
    post_ids = [row["post_id"] for row in likes.unwrap()]
    if not post_ids:
        return []
    result = await store.select("posts", filters={"id": ("in", post_ids)})
    visible = [p for p in result.unwrap() if p["is_public"] or p["author_id"] == user_id]
    return sort_posts(visible, sort)
