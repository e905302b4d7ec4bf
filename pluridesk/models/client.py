"""
Client model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
from pluridesk.database import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    default_currency = Column(String, nullable=False, default="USD")

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
