from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from uuid import uuid4
from datetime import datetime

from modular_house.core.db import Base


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=True, index=True)

    payload = Column(JSON, nullable=False)
    source_page_slug = Column(String(255), nullable=False, index=True)
    consent_flag = Column(Boolean, nullable=False)
    consent_text = Column(Text, nullable=False)

    # HMAC of the client IP, the raw address is never stored
    ip_hash = Column(String(64), nullable=False)
    user_agent = Column(Text)

    # The only column written after creation
    email_log = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    customer = relationship("Customer")
