from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class Post(Base):
    """
    Post model for short text posts with an optional image.

    username, display_name and avatar are a snapshot of the author taken when
    the post is created; later profile edits do not change existing posts.
    """
    __tablename__ = "posts"

    post_id = Column(Integer, primary_key=True, index=True)
    # Foreign key to user - a post can only be created for an existing user
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    username = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    text_content = Column(Text, nullable=False)
    image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="posts")
