from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from uuid import uuid4
from datetime import datetime

from modular_house.core.db import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    quote_number = Column(String(16), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100))
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    address = Column(String(500))
    eircode = Column(String(10))
    product = Column(String(50))
    status = Column(String(20), nullable=False, default="active")
    created_by = Column(String(50))  # "website" for public enquiries
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    notes = relationship("Note", back_populates="customer", order_by="Note.created_at")
