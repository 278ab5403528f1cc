"""
Comment model. Replies point at a top-level comment through parent_id.
"""
from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey, event, update
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base, same_as_created
from .post import Post

CONTENT_MAX_LENGTH = 1000


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    likes_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)
    # Starts equal to created_at; edits set it explicitly
    updated_at = Column(DateTime, default=same_as_created)
    deleted_at = Column(DateTime, nullable=True)  # soft delete tombstone

    # Relationships
    post = relationship("Post", back_populates="comments")
    user = relationship("User", back_populates="comments")
    parent = relationship("Comment", remote_side=[id], back_populates="replies")
    replies = relationship("Comment", back_populates="parent", cascade="all, delete-orphan")
    likes = relationship("CommentLike", back_populates="comment", cascade="all, delete-orphan")


@event.listens_for(Comment, "after_insert")
def _increment_comments_count(mapper, connection, target):
    posts = Post.__table__
    connection.execute(
        update(posts)
        .where(posts.c.id == target.post_id)
        .values(comments_count=posts.c.comments_count + 1)
    )


@event.listens_for(Comment, "after_delete")
def _decrement_comments_count(mapper, connection, target):
    posts = Post.__table__
    connection.execute(
        update(posts)
        .where(posts.c.id == target.post_id, posts.c.comments_count > 0)
        .values(comments_count=posts.c.comments_count - 1)
    )
