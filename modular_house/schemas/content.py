from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, Field

from modular_house.models.gallery import GalleryCategory, PublishStatus
from modular_house.schemas.common import CamelModel

SLUG_PATTERN = r"^[a-z0-9-]+$"


# === Pages ===
class PageCreate(CamelModel):
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, pattern=SLUG_PATTERN)
    hero_headline: Optional[str] = None
    hero_subhead: Optional[str] = None
    hero_image_id: Optional[str] = None
    sections: Optional[List[Any]] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class PageUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1, pattern=SLUG_PATTERN)
    hero_headline: Optional[str] = None
    hero_subhead: Optional[str] = None
    hero_image_id: Optional[str] = None
    sections: Optional[List[Any]] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class PageOut(CamelModel):
    id: str
    title: str
    slug: str
    hero_headline: Optional[str] = None
    hero_subhead: Optional[str] = None
    hero_image_id: Optional[str] = None
    sections: List[Any] = []
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: datetime
    last_modified_at: datetime


# === Gallery ===
def _check_image_url(value: str) -> str:
    # Uploads are served from this API, so relative paths are allowed
    if not (value.startswith("http://") or value.startswith("https://") or value.startswith("/")):
        raise ValueError("Invalid image URL")
    return value


ImageUrl = Annotated[str, Field(min_length=1), AfterValidator(_check_image_url)]


class GalleryItemCreate(CamelModel):
    title: str = Field(..., min_length=1)
    caption: Optional[str] = None
    category: GalleryCategory
    image_url: ImageUrl
    alt_text: str = Field(..., min_length=1)
    project_date: Optional[datetime] = None
    publish_status: Optional[PublishStatus] = None


class GalleryItemUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    caption: Optional[str] = None
    category: Optional[GalleryCategory] = None
    image_url: Optional[ImageUrl] = None
    alt_text: Optional[str] = Field(None, min_length=1)
    project_date: Optional[datetime] = None
    publish_status: Optional[PublishStatus] = None


class GalleryItemOut(CamelModel):
    id: str
    title: str
    caption: Optional[str] = None
    category: GalleryCategory
    image_url: str
    alt_text: str
    project_date: Optional[datetime] = None
    publish_status: PublishStatus
    created_at: datetime
    updated_at: datetime


# === FAQs ===
class FAQCreate(CamelModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    display_order: Optional[int] = None


class FAQUpdate(CamelModel):
    question: Optional[str] = Field(None, min_length=1)
    answer: Optional[str] = Field(None, min_length=1)
    display_order: Optional[int] = None


class FAQOut(CamelModel):
    id: str
    question: str
    answer: str
    display_order: int
    created_at: datetime
    updated_at: datetime


# === Redirects ===
class RedirectCreate(CamelModel):
    source_slug: str = Field(..., min_length=1)
    destination_url: str = Field(..., min_length=1)
    active: Optional[bool] = None


class RedirectUpdate(CamelModel):
    source_slug: Optional[str] = Field(None, min_length=1)
    destination_url: Optional[str] = Field(None, min_length=1)
    active: Optional[bool] = None


class RedirectOut(CamelModel):
    id: str
    source_slug: str
    destination_url: str
    active: bool
    created_at: datetime
    updated_at: datetime


class UploadOut(CamelModel):
    url: str
    filename: str
    mimetype: str
    size: int
