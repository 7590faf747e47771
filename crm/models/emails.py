"""Email correspondence model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text

from ..database import UTCDateTime, utcnow
from .base import Base, new_id


class Email(Base):
    __tablename__ = "emails"
    id = Column(String(36), primary_key=True, default=new_id)
    to = Column(String(500), nullable=False)
    subject = Column(String(500), nullable=False)
    content = Column(Text)
    status = Column(String(20), nullable=False, default="draft")  # draft | sent | failed
    direction = Column(String(20), nullable=False, default="sent")  # sent | received

    # Received mail only
    from_address = Column(String(500))
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(UTCDateTime)

    sent_at = Column(UTCDateTime)
    error = Column(Text)  # last delivery failure reason
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (Index("ix_emails_user_created", "user_id", "created_at"),)
