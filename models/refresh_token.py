"""
RefreshToken model: one row per outstanding refresh token.
Fields:
- token_hash - sha256 hex digest of the raw token (the raw value is never stored)
- user_id (String(36)) - FK to users.id
- expires_at - absolute expiry, naive UTC

A live row is what makes a session "active"; rows are deleted on use
and on logout.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} expires_at={self.expires_at}>"
