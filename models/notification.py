# models/notification.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from .base import Base

KIND_LIKE = "like"
KIND_MATCH = "match"
KIND_MESSAGE = "message"
KIND_GIFT_RECEIVED = "gift_received"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    kind = Column(String(32), nullable=False)
    title = Column(String(255), nullable=False)
    body = Column(String(1024), nullable=False, default="")
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification {self.kind} → {self.user_id}>"
