"""
Search routes over public posts and author nicknames.
"""
from fastapi import APIRouter, Depends

from ..config import get_settings
from ..datastore import AsyncDataStore, StoreError, get_store
from ..responses import store_error
from ..schemas.search import SearchResponse
from ..services.highlight import excerpt, highlight
from ..services.search import search as run_search
from .posts import post_to_dict

settings = get_settings()

router = APIRouter(prefix="/api/search", tags=["search"])


def _spans(text: str, query: str) -> list:
    return [{"text": span.text, "matched": span.matched} for span in highlight(text, query)]


@router.get("", response_model=SearchResponse)
async def search(q: str = "", store: AsyncDataStore = Depends(get_store)):
    """Find public posts by title or content and authors by nickname."""
    try:
        results = await run_search(
            store,
            q,
            post_limit=settings.search_post_limit,
            profile_limit=settings.search_profile_limit,
        )
    except StoreError as e:
        store_error(e, "search")

    return {
        "query": results.query,
        "posts": [
            {
                "post": post_to_dict(post),
                "title_spans": _spans(post.title, results.query),
                "excerpt": excerpt(post.content),
            }
            for post in results.posts
        ],
        "profiles": [
            {**profile, "nickname_spans": _spans(profile["nickname"], results.query)}
            for profile in results.profiles
        ],
    }
