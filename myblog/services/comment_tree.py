"""
Two-level comment threads built from a flat page of comments.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List

from .records import DELETED_PLACEHOLDER, CommentView

__all__ = ["CommentThread", "build_comment_tree", "DELETED_PLACEHOLDER"]


@dataclass
class CommentThread:
    comment: CommentView
    replies: List[CommentView] = field(default_factory=list)

    @property
    def size(self) -> int:
        return 1 + len(self.replies)


def _created(comment: CommentView) -> datetime:
    return comment.created_at or datetime.min


def build_comment_tree(comments: Iterable[CommentView]) -> List[CommentThread]:
    """Group replies under their top-level comment.

    Top-level comments keep the order they arrived in (newest first from the
    pager). Replies inside a thread are oldest first. A reply whose parent is
    not among the given comments is left out.
    """
    comments = list(comments)
    threads: List[CommentThread] = []
    by_id: Dict[int, CommentThread] = {}

    for comment in comments:
        if comment.parent_id is None and comment.id not in by_id:
            thread = CommentThread(comment)
            threads.append(thread)
            by_id[comment.id] = thread

    seen = set()
    for comment in comments:
        if comment.parent_id is None or comment.id in seen:
            continue
        thread = by_id.get(comment.parent_id)
        if thread is None:
            continue
        thread.replies.append(comment)
        seen.add(comment.id)

    for thread in threads:
        # sort() is stable so equal timestamps keep arrival order
        thread.replies.sort(key=_created)
    return threads
