import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from modular_house.core.errors import ConflictError, DomainValidationError, NotFoundError
from modular_house.models.gallery import GalleryItem
from modular_house.models.page import Page
from modular_house.schemas.content import PageCreate, PageUpdate

logger = logging.getLogger(__name__)

# Explicit nulls are ignored for these, the rest may be cleared
REQUIRED_FIELDS = {"title", "slug", "sections"}


def _slug_taken(db: Session, slug: str) -> bool:
    return db.query(Page.id).filter(Page.slug == slug).first() is not None


def _check_hero_image(db: Session, hero_image_id: Optional[str]) -> None:
    if hero_image_id and not db.get(GalleryItem, hero_image_id):
        raise DomainValidationError(f'Hero image "{hero_image_id}" does not exist')


def list_pages(db: Session) -> List[Page]:
    return db.query(Page).order_by(Page.title.asc()).all()


def get_page(db: Session, page_id: str) -> Optional[Page]:
    return db.get(Page, page_id)


def get_page_by_slug(db: Session, slug: str) -> Optional[Page]:
    return db.query(Page).filter(Page.slug == slug).first()


def create_page(db: Session, data: PageCreate) -> Page:
    if _slug_taken(db, data.slug):
        raise ConflictError(f'Page with slug "{data.slug}" already exists')
    _check_hero_image(db, data.hero_image_id)

    page = Page(**data.model_dump(exclude={"sections"}), sections=data.sections or [])
    db.add(page)
    db.commit()
    logger.info(f"📄 Page created: {page.id} ({page.slug})")
    return page


def update_page(db: Session, page_id: str, data: PageUpdate) -> Page:
    page = db.get(Page, page_id)
    if not page:
        raise NotFoundError(f'Page with ID "{page_id}" not found')

    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k not in REQUIRED_FIELDS
    }
    if changes.get("slug") and changes["slug"] != page.slug and _slug_taken(db, changes["slug"]):
        raise ConflictError(f'Page with slug "{changes["slug"]}" already exists')
    if "hero_image_id" in changes:
        _check_hero_image(db, changes["hero_image_id"])

    for key, value in changes.items():
        setattr(page, key, value)
    page.last_modified_at = datetime.utcnow()
    db.commit()
    logger.info(f"📄 Page updated: {page.id}")
    return page


def delete_page(db: Session, page_id: str) -> None:
    page = db.get(Page, page_id)
    if not page:
        raise NotFoundError(f'Page with ID "{page_id}" not found')
    db.delete(page)
    db.commit()
    logger.info(f"🗑️ Page deleted: {page_id}")
