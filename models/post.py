from sqlalchemy import Column, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Post(BaseModel, Base):
    __tablename__ = "posts"

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    # posix path of the stored image, e.g. public/media/1712345678901.png
    media = Column(String(255), nullable=True)

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", passive_deletes=True)

    __table_args__ = (
        Index("ix_posts_created_at_id", "created_at", "id"),
    )
