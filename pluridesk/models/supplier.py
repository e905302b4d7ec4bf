"""
Supplier model - freelance translators and agencies work is outsourced to
"""
from sqlalchemy import Column, Integer, String, Text, Boolean
from pluridesk.database import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)

    # Notes
    notes = Column(Text, nullable=True)

    # Status
    is_active = Column(Boolean, default=True)
