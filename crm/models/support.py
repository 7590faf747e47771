"""Support ticket model."""

from sqlalchemy import Column, Index, String, Text

from ..database import UTCDateTime, utcnow
from .base import Base, new_id


class SupportTicket(Base):
    __tablename__ = "support_tickets"
    id = Column(String(36), primary_key=True, default=new_id)
    user = Column(String(255), nullable=False)  # reporter's name, free text
    email = Column(String(255))
    issue = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False, default="medium")

    # Status workflow: open → in_progress → resolved (open → resolved allowed)
    status = Column(String(20), nullable=False, default="open")
    resolved_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (Index("ix_support_tickets_status_created", "status", "created_at"),)
