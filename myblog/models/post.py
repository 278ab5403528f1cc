"""
Post model for blog articles.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base, same_as_created

TITLE_MAX_LENGTH = 200
MAX_TAGS = 5


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    content = Column(Text, nullable=False)
    slug = Column(String(120), unique=True, nullable=True)
    thumbnail_url = Column(String(1000), nullable=True)
    tags = Column(JSON, default=list)
    is_public = Column(Boolean, default=True, index=True)
    views = Column(Integer, default=0, nullable=False)
    # Maintained by the like/comment mapper events, display only
    likes_count = Column(Integer, default=0, nullable=False)
    comments_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)
    # Set explicitly on edits so counter and view bumps never read as edits
    updated_at = Column(DateTime, default=same_as_created)

    # Relationships
    author = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="post", cascade="all, delete-orphan")
