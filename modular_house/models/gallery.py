import enum
from sqlalchemy import Column, String, Text, DateTime, Enum
from uuid import uuid4
from datetime import datetime

from modular_house.core.db import Base


class GalleryCategory(str, enum.Enum):
    GARDEN_ROOM = "GARDEN_ROOM"
    HOUSE_EXTENSION = "HOUSE_EXTENSION"


class PublishStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class GalleryItem(Base):
    __tablename__ = "gallery_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title = Column(String(255), nullable=False)
    caption = Column(Text)
    category = Column(Enum(GalleryCategory), nullable=False)
    image_url = Column(Text, nullable=False)
    alt_text = Column(Text, nullable=False, default="")
    project_date = Column(DateTime, nullable=True)
    publish_status = Column(Enum(PublishStatus), nullable=False, default=PublishStatus.DRAFT)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
