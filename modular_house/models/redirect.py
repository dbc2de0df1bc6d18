from sqlalchemy import Column, String, Text, Boolean, DateTime
from uuid import uuid4
from datetime import datetime

from modular_house.core.db import Base


class Redirect(Base):
    __tablename__ = "redirects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    # Stored without the leading slash
    source_slug = Column(String(255), unique=True, index=True, nullable=False)
    destination_url = Column(Text, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
