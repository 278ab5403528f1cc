"""
Join rows recording that an account liked a post or a comment.
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, event, update
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base
from .comment import Comment
from .post import Post


class Like(Base):
    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_likes_post_user"),)  # 1 like / user

    # Relationships
    post = relationship("Post", back_populates="likes")
    user = relationship("User", back_populates="likes")


class CommentLike(Base):
    __tablename__ = "comment_likes"

    id = Column(Integer, primary_key=True, index=True)
    comment_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (UniqueConstraint("comment_id", "user_id", name="uq_comment_likes_comment_user"),)

    # Relationships
    comment = relationship("Comment", back_populates="likes")
    user = relationship("User", back_populates="comment_likes")


def _adjust_likes_count(connection, table, row_id, delta):
    statement = update(table).where(table.c.id == row_id)
    if delta < 0:
        statement = statement.where(table.c.likes_count > 0)
    connection.execute(statement.values(likes_count=table.c.likes_count + delta))


@event.listens_for(Like, "after_insert")
def _post_liked(mapper, connection, target):
    _adjust_likes_count(connection, Post.__table__, target.post_id, 1)


@event.listens_for(Like, "after_delete")
def _post_unliked(mapper, connection, target):
    _adjust_likes_count(connection, Post.__table__, target.post_id, -1)


@event.listens_for(CommentLike, "after_insert")
def _comment_liked(mapper, connection, target):
    _adjust_likes_count(connection, Comment.__table__, target.comment_id, 1)


@event.listens_for(CommentLike, "after_delete")
def _comment_unliked(mapper, connection, target):
    _adjust_likes_count(connection, Comment.__table__, target.comment_id, -1)
