"""
Quote models - itemized pre-sale estimates
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from pluridesk.database import Base


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Quote(Base):
    """Estimate sent to a client, may be converted into a job"""
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)

    # Quote details
    quote_number = Column(String, nullable=False)
    date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)

    # Financial
    currency = Column(String, nullable=False, default="USD")
    total = Column(Float, nullable=False, default=0)

    # Status
    status = Column(String, nullable=False, default=QuoteStatus.DRAFT.value)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    client = relationship("Client")
    items = relationship(
        "QuoteItem",
        back_populates="quote",
        order_by="QuoteItem.position",
        cascade="all, delete-orphan",
    )


class QuoteItem(Base):
    """Line item in a quote"""
    __tablename__ = "quote_items"

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    description = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    rate = Column(Float, nullable=False)
    amount = Column(Float, nullable=False)  # quantity * rate when written

    # Relationships
    quote = relationship("Quote", back_populates="items")
