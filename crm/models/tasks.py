"""Calendar task model."""

from sqlalchemy import Column, ForeignKey, Index, String

from ..database import UTCDateTime, utcnow
from .base import Base, new_id


class Task(Base):
    __tablename__ = "tasks"
    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(500), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(5), nullable=False)  # HH:MM
    priority = Column(String(10), nullable=False, default="medium")  # low | medium | high
    status = Column(String(20), nullable=False, default="pending")  # pending | completed
    completed_at = Column(UTCDateTime)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (Index("ix_tasks_user_created", "user_id", "created_at"),)
