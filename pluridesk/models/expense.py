"""
Expense model - business costs outside of outsourcing
"""
from sqlalchemy import Column, Integer, Float, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from pluridesk.database import Base

EXPENSE_CATEGORIES = [
    "Software",
    "Hardware",
    "Office Supplies",
    "Marketing",
    "Travel",
    "Training",
    "Legal",
    "Accounting",
    "Insurance",
    "Utilities",
    "Rent",
    "Other",
]


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=True)
    category = Column(String, nullable=False, default="Other")
    amount = Column(Float, nullable=False)
    currency = Column(String, nullable=False, default="USD")
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    supplier_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    supplier = relationship("Supplier")
