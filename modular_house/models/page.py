from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from uuid import uuid4
from datetime import datetime

from modular_house.core.db import Base


class Page(Base):
    __tablename__ = "pages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    hero_headline = Column(Text)
    hero_subhead = Column(Text)
    hero_image_id = Column(String(36), ForeignKey("gallery_items.id"), nullable=True)
    sections = Column(JSON, nullable=False, default=list)
    seo_title = Column(String(255))
    seo_description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_modified_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    hero_image = relationship("GalleryItem")
