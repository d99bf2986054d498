from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class User(Base):
    """
    User model representing application users.

    Holds credentials and the mutable public profile (display name, avatar, bio).
    Passwords are stored as hashes (never plaintext).
    """
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True)
    # Username is unique and indexed for fast lookups during sign-in
    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    # Public path of the avatar, e.g. /images/<uuid>.png
    image = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationship allows accessing posts from user: user.posts
    posts = relationship("Post", back_populates="user")
