"""
Like model: identity is the (user_id, post_id) pair, so a user likes a post
at most once.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func

from models.base_model import Base, utcnow


class Like(Base):
    __tablename__ = "likes"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Like user={self.user_id} post={self.post_id}>"
