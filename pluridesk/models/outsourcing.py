"""
Outsourcing model - work on a job handed off to a supplier, with its payable
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from pluridesk.database import Base


class OutsourcingStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Outsourcing(Base):
    __tablename__ = "outsourcing"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=True)

    # Work
    service_type = Column(String, nullable=True)
    unit = Column(String, nullable=True)  # word, hour, page, project, file
    quantity = Column(Float, nullable=True)
    status = Column(String, nullable=False, default=OutsourcingStatus.PENDING.value)
    due_date = Column(Date, nullable=True)

    # Payable
    supplier_rate = Column(Float, nullable=True)
    supplier_currency = Column(String, nullable=False, default="USD")
    supplier_total = Column(Float, nullable=True)
    paid = Column(Boolean, nullable=False, default=False)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    job = relationship("Job", back_populates="outsourcing")
    supplier = relationship("Supplier")
    purchase_order = relationship("PurchaseOrder", back_populates="outsourcing")
