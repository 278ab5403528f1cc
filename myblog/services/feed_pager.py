"""
Infinite-scroll pager over the public post feed.
"""
from typing import Dict, List, Optional

from ..datastore import AsyncDataStore, StoreError
from ..logging_config import client_logger
from .records import PostCard, attach_post_authors

FEED_PAGE_SIZE = 12

LATEST = "latest"
POPULAR = "popular"

SORT_ORDERS: Dict[str, list] = {
    LATEST: [("created_at", "desc"), ("id", "desc")],
    POPULAR: [("likes_count", "desc"), ("comments_count", "desc"), ("created_at", "desc"), ("id", "desc")],
}


def _order_for(sort: str) -> list:
    try:
        return SORT_ORDERS[sort]
    except KeyError:
        raise ValueError(f"Unknown sort mode '{sort}'. Use one of: {', '.join(SORT_ORDERS)}")


async def fetch_public_posts(
    store: AsyncDataStore,
    page: int,
    sort: str = LATEST,
    page_size: int = FEED_PAGE_SIZE,
) -> List[PostCard]:
    """Fetch one 0-based page of public posts. Raises StoreError on failure."""
    if page < 0:
        raise ValueError("page must be 0 or greater")
    start = page * page_size
    result = await store.select(
        "posts",
        filters={"is_public": True},
        order=_order_for(sort),
        range=(start, start + page_size - 1),
    )
    return await attach_post_authors(store, result.unwrap())


class FeedPager:
    """Accumulated feed state driven by a visibility sentinel.

    At most one fetch is in flight (``busy``). Responses issued under an older
    generation than the current one are discarded.
    """

    def __init__(self, store: AsyncDataStore, sort: str = LATEST, page_size: int = FEED_PAGE_SIZE):
        _order_for(sort)
        self.store = store
        self.sort = sort
        self.page_size = page_size
        self.posts: List[PostCard] = []
        self.page: Optional[int] = None
        self.exhausted = False
        self.busy = False
        self.closed = False
        self.error: Optional[StoreError] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def next_page(self) -> int:
        return 0 if self.page is None else self.page + 1

    async def fetch_page(self, page: int, sort: Optional[str] = None, replace: bool = False) -> bool:
        """Fetch ``page`` and merge it. Returns False when skipped, stale or failed."""
        if self.closed or self.busy:
            return False
        sort = sort or self.sort
        _order_for(sort)
        if sort != self.sort and not replace:
            raise ValueError("Changing the sort mode needs replace=True; use set_sort")

        generation = self._generation
        self.busy = True
        try:
            posts = await fetch_public_posts(self.store, page, sort, self.page_size)
        except StoreError as e:
            if generation == self._generation:
                self.error = e
                client_logger.warning("feed page failed", page=page, sort=sort, code=e.code)
            return False
        finally:
            if generation == self._generation:
                self.busy = False

        if generation != self._generation or self.closed:
            client_logger.debug("dropping stale feed page", page=page, sort=sort)
            return False

        if replace:
            self.posts = []
        known = {post.id for post in self.posts}
        for post in posts:
            if post.id not in known:
                self.posts.append(post)
                known.add(post.id)

        self.sort = sort
        self.page = page
        self.exhausted = len(posts) < self.page_size
        self.error = None
        return True

    async def on_visible(self) -> bool:
        """Sentinel came into view. Safe to call repeatedly."""
        if self.closed or self.busy or self.exhausted:
            return False
        return await self.fetch_page(self.next_page)

    async def set_sort(self, sort: str) -> bool:
        """Switch sort mode and restart from page 0."""
        _order_for(sort)
        self._generation += 1
        self.sort = sort
        self.posts = []
        self.page = None
        self.exhausted = False
        self.busy = False
        self.error = None
        return await self.fetch_page(0, sort, replace=True)

    def close(self) -> None:
        self._generation += 1
        self.closed = True
        self.busy = False
