"""
Purchase order model - a numbered order sent to a supplier for outsourced work
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from pluridesk.database import Base


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True, index=True)

    po_number = Column(String, nullable=False)
    date = Column(Date, nullable=True)
    amount = Column(Float, nullable=True)
    currency = Column(String, nullable=False, default="USD")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    job = relationship("Job")
    supplier = relationship("Supplier")
    outsourcing = relationship("Outsourcing", back_populates="purchase_order")
