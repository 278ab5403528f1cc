"""
Optimistic like toggling for posts and comments.
"""
from dataclasses import dataclass
from typing import Optional

from ..datastore import AsyncDataStore
from ..datastore.errors import NOT_AUTHENTICATED, UNIQUE_VIOLATION
from ..logging_config import client_logger

ALREADY_LIKED = "You already liked this."


@dataclass(frozen=True)
class LikeTarget:
    collection: str
    key: str
    label: str


POST_LIKES = LikeTarget("likes", "post_id", "post")
COMMENT_LIKES = LikeTarget("comment_likes", "comment_id", "comment")


class LikeError(Exception):
    """A like change failed and the local state was rolled back."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(message)


@dataclass(frozen=True)
class LikeOutcome:
    liked: bool
    count: int
    notice: Optional[str] = None


class LikeToggle:
    """Local like state for one target as seen by one user.

    ``count`` is a display value seeded from the target's counter column and
    adjusted optimistically; the stored counter is maintained by the data store.
    """

    def __init__(
        self,
        store: AsyncDataStore,
        target: LikeTarget,
        target_id: int,
        user_id: Optional[int],
        count: int = 0,
        liked: bool = False,
    ):
        self.store = store
        self.target = target
        self.target_id = target_id
        self.user_id = user_id
        self.count = count
        self.liked = liked

    @property
    def outcome(self) -> LikeOutcome:
        return LikeOutcome(self.liked, self.count)

    def _filters(self) -> dict:
        return {self.target.key: self.target_id, "user_id": self.user_id}

    async def load(self) -> bool:
        """Read whether the user already likes the target."""
        if self.user_id is None:
            self.liked = False
            return self.liked
        result = await self.store.select(self.target.collection, filters=self._filters(), columns=["id"], limit=1)
        if result.error:
            client_logger.warning(
                f"could not read {self.target.label} like state",
                target_id=self.target_id,
                code=result.error.code,
            )
            return self.liked
        self.liked = bool(result.data)
        return self.liked

    async def toggle(self) -> LikeOutcome:
        if self.user_id is None:
            raise LikeError("Sign in to like this.", NOT_AUTHENTICATED)

        previous_liked, previous_count = self.liked, self.count

        if previous_liked:
            self.liked, self.count = False, max(previous_count - 1, 0)
            result = await self.store.delete(self.target.collection, self._filters())
            if result.error:
                self.liked, self.count = previous_liked, previous_count
                client_logger.warning(
                    f"{self.target.label} unlike failed",
                    target_id=self.target_id,
                    code=result.error.code,
                )
                raise LikeError("Could not remove your like. Please try again.", result.error.code)
            return self.outcome

        self.liked, self.count = True, previous_count + 1
        result = await self.store.insert(self.target.collection, self._filters())
        if result.error:
            if result.error.code == UNIQUE_VIOLATION:
                # Another request won the race; the like already exists
                self.liked, self.count = True, previous_count
                return LikeOutcome(True, previous_count, ALREADY_LIKED)
            self.liked, self.count = previous_liked, previous_count
            client_logger.warning(
                f"{self.target.label} like failed",
                target_id=self.target_id,
                code=result.error.code,
            )
            raise LikeError("Could not save your like. Please try again.", result.error.code)
        return self.outcome
