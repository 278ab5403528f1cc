"""
Post and author search.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..datastore import AsyncDataStore, like_pattern
from .records import PostCard, attach_post_authors

SEARCH_POST_LIMIT = 20
SEARCH_PROFILE_LIMIT = 10


@dataclass
class SearchResults:
    query: str
    posts: List[PostCard] = field(default_factory=list)
    profiles: List[Dict[str, Any]] = field(default_factory=list)


async def search(
    store: AsyncDataStore,
    query: str,
    post_limit: int = SEARCH_POST_LIMIT,
    profile_limit: int = SEARCH_PROFILE_LIMIT,
) -> SearchResults:
    """Case-insensitive substring search over public posts and nicknames. Raises StoreError."""
    query = query.strip()
    if not query:
        return SearchResults(query=query)
    pattern = like_pattern(query)

    posts = await store.select(
        "posts",
        filters={"is_public": True},
        any_ilike=(["title", "content"], pattern),
        order=[("created_at", "desc"), ("id", "desc")],
        limit=post_limit,
    )
    cards = await attach_post_authors(store, posts.unwrap())

    profiles = await store.select(
        "profiles",
        filters={"nickname": ("ilike", pattern)},
        columns=["id", "nickname", "bio", "avatar_url"],
        order=[("nickname", "asc")],
        limit=profile_limit,
    )
    return SearchResults(query=query, posts=cards, profiles=profiles.unwrap())
