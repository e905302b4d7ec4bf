"""
Job model - a unit of billable work for a client
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from pluridesk.database import Base


class JobStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    INVOICED = "invoiced"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class PricingType(str, Enum):
    PER_WORD = "per_word"
    PER_HOUR = "per_hour"
    FLAT_FEE = "flat_fee"


class ServiceType(str, Enum):
    TRANSLATION = "translation"
    PROOFREADING = "proofreading"
    TRANSCREATION = "transcreation"
    LQA = "LQA"
    DESKTOP_PUBLISHING = "desktop_publishing"


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)

    # Identification
    job_code = Column(String, nullable=True, index=True)
    title = Column(String, nullable=False)
    service_type = Column(String, nullable=False, default=ServiceType.TRANSLATION.value)

    # Pricing
    pricing_type = Column(String, nullable=False, default=PricingType.PER_WORD.value)
    quantity = Column(Float, nullable=True)
    rate = Column(Float, nullable=True)
    currency = Column(String, nullable=False, default="USD")
    total_amount = Column(Float, nullable=False, default=0)  # derived at write time

    # Status
    status = Column(String, nullable=False, default=JobStatus.CREATED.value)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True)
    has_outsourcing = Column(Boolean, default=False)

    # Schedule
    start_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    client = relationship("Client")
    invoice = relationship("Invoice", back_populates="jobs")
    outsourcing = relationship("Outsourcing", back_populates="job")
