"""
Paged loading of a post's comments, newest first.
"""
from dataclasses import dataclass
from typing import List, Optional

from ..datastore import AsyncDataStore, StoreError
from ..logging_config import client_logger
from .comment_tree import CommentThread, build_comment_tree
from .records import CommentView, attach_comment_authors

COMMENT_PAGE_SIZE = 20


@dataclass
class CommentPage:
    comments: List[CommentView]
    total: int
    page: int
    page_size: int = COMMENT_PAGE_SIZE

    @property
    def has_more(self) -> bool:
        return self.total > self.page * self.page_size

    @property
    def threads(self) -> List[CommentThread]:
        return build_comment_tree(self.comments)


async def fetch_comment_rows(store: AsyncDataStore, post_id: int, start: int, end: int):
    """Return (comments, total) for rows start..end inclusive. Raises StoreError."""
    counted = await store.count("comments", {"post_id": post_id})
    if counted.error:
        raise counted.error
    result = await store.select(
        "comments",
        filters={"post_id": post_id},
        order=[("created_at", "desc"), ("id", "desc")],
        range=(start, end),
    )
    rows = result.unwrap()
    return await attach_comment_authors(store, rows), counted.count or 0


async def fetch_comments(
    store: AsyncDataStore,
    post_id: int,
    page: int = 1,
    page_size: int = COMMENT_PAGE_SIZE,
) -> CommentPage:
    """Fetch one 1-based page of comments with the post's total comment count."""
    if page < 1:
        raise ValueError("page must be 1 or greater")
    start = (page - 1) * page_size
    comments, total = await fetch_comment_rows(store, post_id, start, start + page_size - 1)
    return CommentPage(comments=comments, total=total, page=page, page_size=page_size)


class CommentPager:
    """Accumulates comment pages for one post.

    Every request is tagged with the generation current when it was issued;
    ``reset`` and ``close`` bump the generation so late responses are dropped.
    At most one fetch is in flight (``loading``).
    """

    def __init__(self, store: AsyncDataStore, post_id: int, page_size: int = COMMENT_PAGE_SIZE):
        self.store = store
        self.post_id = post_id
        self.page_size = page_size
        self.comments: List[CommentView] = []
        self.total = 0
        self.page = 0
        self.loading = False
        self.closed = False
        self.error: Optional[StoreError] = None
        self._generation = 0
        self._refresh_pending = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_more(self) -> bool:
        return self.total > self.page * self.page_size

    @property
    def remaining(self) -> int:
        return max(self.total - len(self.comments), 0)

    @property
    def threads(self) -> List[CommentThread]:
        return build_comment_tree(self.comments)

    async def _fetch(self, start: int, end: int, page: int, append: bool) -> bool:
        generation = self._generation
        self.loading = True
        try:
            comments, total = await fetch_comment_rows(self.store, self.post_id, start, end)
        except StoreError as e:
            if generation == self._generation:
                self.error = e
                client_logger.warning("comment load failed", post_id=self.post_id, code=e.code)
            return False
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation or self.closed:
            client_logger.debug("dropping stale comment page", post_id=self.post_id, page=page)
            return False

        if append:
            known = {c.id for c in self.comments}
            self.comments.extend(c for c in comments if c.id not in known)
        else:
            self.comments = comments
        self.total = total
        self.page = page
        self.error = None
        return True

    async def _run(self, start: int, end: int, page: int, append: bool) -> bool:
        generation = self._generation
        applied = await self._fetch(start, end, page, append)
        while self._refresh_pending and not self.closed and generation == self._generation:
            self._refresh_pending = False
            page = max(self.page, 1)
            applied = await self._fetch(0, page * self.page_size - 1, page, append=False)
        return applied

    async def load(self, page: int = 1) -> bool:
        """Replace the list with one page."""
        if self.closed or self.loading:
            return False
        start = (page - 1) * self.page_size
        return await self._run(start, start + self.page_size - 1, page, append=False)

    async def load_more(self) -> bool:
        if self.closed or self.loading or not self.has_more:
            return False
        page = self.page + 1
        start = (page - 1) * self.page_size
        return await self._run(start, start + self.page_size - 1, page, append=True)

    async def refresh(self) -> bool:
        """Reload every page loaded so far, after a comment was added, edited or deleted.

        While a fetch is in flight the reload is queued and runs once that
        fetch settles; the call itself returns False.
        """
        if self.closed:
            return False
        if self.loading:
            self._refresh_pending = True
            return False
        page = max(self.page, 1)
        return await self._run(0, page * self.page_size - 1, page, append=False)

    def reset(self, post_id: int) -> None:
        self._generation += 1
        self.post_id = post_id
        self.comments = []
        self.total = 0
        self.page = 0
        self.loading = False
        self._refresh_pending = False
        self.error = None

    def close(self) -> None:
        self._generation += 1
        self.closed = True
        self.loading = False
        self._refresh_pending = False
