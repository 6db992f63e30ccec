"""
RefreshToken model: one row per live refresh token of a user.
Fields:
- user_id (String(36)) - FK to users.id
- token - the signed refresh token string
A row exists only while its token is ISSUED; rotation and logout delete it,
reuse detection deletes every row of the user.
"""
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "user_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(1024), nullable=False)

    user = relationship("User", back_populates="tokens")

    __table_args__ = (
        UniqueConstraint("user_id", "token", name="uq_user_tokens_user_token"),
    )

    def __repr__(self):
        return f"<RefreshToken user={self.user_id}>"
