"""In-app notification model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text

from ..database import UTCDateTime, utcnow
from .base import Base, new_id


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(String(36), primary_key=True, default=new_id)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="info")  # info | success | warning | error
    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(UTCDateTime)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (Index("ix_notifications_user_read", "user_id", "read", "created_at"),)
