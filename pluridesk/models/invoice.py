"""
Invoice models
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from pluridesk.database import Base


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class Invoice(Base):
    """Billing document issued to a client"""
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("owner_id", "invoice_number", name="uq_invoices_owner_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)

    # Invoice details
    invoice_number = Column(String, nullable=False)
    date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)

    # Line items: [{description, quantity, rate, amount}, ...] in display order
    items = Column(JSON, nullable=False, default=list)

    # Financial
    currency = Column(String, nullable=False, default="USD")
    subtotal = Column(Float, nullable=False, default=0)
    tax_amount = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)

    # Status
    status = Column(String, nullable=False, default=InvoiceStatus.DRAFT.value)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    client = relationship("Client")
    payments = relationship(
        "Payment",
        back_populates="invoice",
        order_by="Payment.date",
        cascade="all, delete-orphan",
    )
    jobs = relationship("Job", back_populates="invoice")


class InvoiceCounter(Base):
    """Last invoice number handed out per owner"""
    __tablename__ = "invoice_counters"

    owner_id = Column(String, primary_key=True)
    last_number = Column(Integer, nullable=False, default=0)
