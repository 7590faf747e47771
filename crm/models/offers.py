"""Sales offer model.

final_amount is derived from (amount, discount_percent, vat_rate) by
services/pricing.py and stored redundantly for listing and search.
"""

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime, utcnow
from .base import Base, new_id


class Offer(Base):
    __tablename__ = "offers"
    id = Column(String(36), primary_key=True, default=new_id)
    contractor_id = Column(String(36), ForeignKey("contractors.id", ondelete="SET NULL"))
    contractor_name = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text)

    amount = Column(Integer, nullable=False)  # net
    vat_rate = Column(Integer, nullable=False, default=23)
    discount_percent = Column(Integer, nullable=False, default=0)
    final_amount = Column(Integer, nullable=False)  # gross
    currency = Column(String(10), nullable=False, default="PLN")

    valid_until = Column(Date)
    payment_terms = Column(String(100), default="14 dni")
    category = Column(String(100), default="Standardowa")
    notes = Column(Text)

    # draft → sent → accepted | rejected; draft | sent → expired
    status = Column(String(20), nullable=False, default="draft")
    sent_at = Column(UTCDateTime)
    decided_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, default=utcnow)

    contractor = relationship("Contractor", foreign_keys=[contractor_id])

    __table_args__ = (
        Index("ix_offers_status", "status"),
        Index("ix_offers_contractor", "contractor_id"),
    )
