"""
Profile model, one row per account.
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base

NICKNAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 200


class Profile(Base):
    __tablename__ = "profiles"

    # Shares its primary key with the owning account
    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String(255), nullable=True)
    nickname = Column(String(NICKNAME_MAX_LENGTH), nullable=False, index=True)
    bio = Column(String(BIO_MAX_LENGTH), nullable=True)
    avatar_url = Column(String(1000), nullable=True)
    email_public = Column(Boolean, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="profile")
