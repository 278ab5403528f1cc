"""
Tests for optimistic like toggling.
"""
import asyncio

import pytest

from myblog.datastore import Result
from myblog.datastore.errors import CONNECTION_FAILURE, NOT_AUTHENTICATED, UNIQUE_VIOLATION
from myblog.services.likes import ALREADY_LIKED, COMMENT_LIKES, POST_LIKES, LikeError, LikeOutcome, LikeToggle


class ScriptedStore:
    """Returns a fixed result for writes and records what the toggle saw before each write."""

    def __init__(self, insert_result=None, delete_result=None, existing=None):
        self.insert_result = insert_result or Result(data=[{"id": 1}])
        self.delete_result = delete_result or Result(data=[{"id": 1}])
        self.existing = existing or []
        self.toggle = None
        self.seen = []

    async def select(self, collection, **kwargs):
        return Result(data=self.existing)

    async def insert(self, collection, record):
        self.seen.append((self.toggle.liked, self.toggle.count))
        return self.insert_result

    async def delete(self, collection, filters):
        self.seen.append((self.toggle.liked, self.toggle.count))
        return self.delete_result


def make_toggle(store, liked=False, count=3, user_id=10):
    toggle = LikeToggle(store, POST_LIKES, 5, user_id, count=count, liked=liked)
    store.toggle = toggle
    return toggle


class TestLikeToggle:
    def test_like_is_optimistic(self):
        store = ScriptedStore()
        toggle = make_toggle(store)
        outcome = asyncio.run(toggle.toggle())
        assert store.seen == [(True, 4)]
        assert (outcome.liked, outcome.count, outcome.notice) == (True, 4, None)

    def test_unlike(self):
        store = ScriptedStore()
        toggle = make_toggle(store, liked=True, count=1)
        outcome = asyncio.run(toggle.toggle())
        assert store.seen == [(False, 0)]
        assert (outcome.liked, outcome.count) == (False, 0)

    def test_unlike_never_goes_negative(self):
        toggle = make_toggle(ScriptedStore(), liked=True, count=0)
        assert asyncio.run(toggle.toggle()).count == 0

    def test_conflict_means_already_liked(self):
        store = ScriptedStore(insert_result=Result.failure(UNIQUE_VIOLATION, "duplicate key"))
        toggle = make_toggle(store, count=3)
        outcome = asyncio.run(toggle.toggle())
        assert outcome == LikeOutcome(True, 3, ALREADY_LIKED)
        assert toggle.liked is True
        assert toggle.count == 3

    def test_failed_like_rolls_back(self):
        store = ScriptedStore(insert_result=Result.failure(CONNECTION_FAILURE, "down"))
        toggle = make_toggle(store, count=3)
        with pytest.raises(LikeError) as exc_info:
            asyncio.run(toggle.toggle())
        assert exc_info.value.code == CONNECTION_FAILURE
        assert (toggle.liked, toggle.count) == (False, 3)

    def test_failed_unlike_rolls_back(self):
        store = ScriptedStore(delete_result=Result.failure(CONNECTION_FAILURE, "down"))
        toggle = make_toggle(store, liked=True, count=3)
        with pytest.raises(LikeError):
            asyncio.run(toggle.toggle())
        assert (toggle.liked, toggle.count) == (True, 3)

    def test_anonymous_cannot_like(self):
        toggle = make_toggle(ScriptedStore(), user_id=None)
        with pytest.raises(LikeError) as exc_info:
            asyncio.run(toggle.toggle())
        assert exc_info.value.code == NOT_AUTHENTICATED

    def test_load_reads_existing_like(self):
        store = ScriptedStore(existing=[{"id": 1}])
        toggle = make_toggle(store)
        assert asyncio.run(toggle.load()) is True

    def test_load_anonymous(self):
        toggle = make_toggle(ScriptedStore(existing=[{"id": 1}]), liked=True, user_id=None)
        assert asyncio.run(toggle.load()) is False


class TestLikeToggleWithStore:
    def test_post_like_round_trip(self, async_store, db, test_user, make_post):
        post = make_post(test_user)
        toggle = LikeToggle(async_store, POST_LIKES, post.id, test_user.id, post.likes_count)

        assert asyncio.run(toggle.toggle()).liked is True
        db.refresh(post)
        assert post.likes_count == 1

        # A second client that has not seen the like yet
        stale = LikeToggle(async_store, POST_LIKES, post.id, test_user.id, 0)
        outcome = asyncio.run(stale.toggle())
        assert outcome.notice == ALREADY_LIKED
        db.refresh(post)
        assert post.likes_count == 1

    def test_comment_like(self, async_store, store, test_user, make_post):
        post = make_post(test_user)
        comment = store.insert("comments", {"post_id": post.id, "user_id": test_user.id, "content": "x"}).data[0]
        toggle = LikeToggle(async_store, COMMENT_LIKES, comment["id"], test_user.id)
        asyncio.run(toggle.toggle())
        assert asyncio.run(toggle.load()) is True
        assert store.select_single("comments", {"id": comment["id"]}).data["likes_count"] == 1
