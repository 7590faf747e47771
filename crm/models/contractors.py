"""Contractor (client) model."""

from sqlalchemy import Column, Index, String, Text

from ..database import UTCDateTime, utcnow
from .base import Base, new_id


class Contractor(Base):
    """A client or supplier. Polish registry ids (NIP/REGON/KRS) are optional."""

    __tablename__ = "contractors"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(100), nullable=False)

    nip = Column(String(20))
    regon = Column(String(20))
    krs = Column(String(20))
    account_number = Column(String(64))

    province = Column(String(100))
    address = Column(Text)
    city = Column(String(255))
    postal_code = Column(String(20))
    country = Column(String(100), default="Polska")

    status = Column(String(20), nullable=False, default="active")  # active | inactive
    created_at = Column(UTCDateTime, default=utcnow)

    __table_args__ = (
        Index("ix_contractors_name", "name"),
        Index("ix_contractors_status", "status"),
    )
