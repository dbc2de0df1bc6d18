import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from modular_house.core.errors import DomainValidationError, NotFoundError
from modular_house.models.gallery import GalleryCategory, GalleryItem, PublishStatus
from modular_house.schemas.content import GalleryItemCreate, GalleryItemUpdate

logger = logging.getLogger(__name__)

ALT_TEXT_REQUIRED = "Alt text is required for published items"


def list_items(db: Session, category: Optional[GalleryCategory] = None,
               publish_status: Optional[PublishStatus] = None) -> List[GalleryItem]:
    query = db.query(GalleryItem)
    if category:
        query = query.filter(GalleryItem.category == category)
    if publish_status:
        query = query.filter(GalleryItem.publish_status == publish_status)
    return query.order_by(GalleryItem.created_at.desc()).all()


def get_item(db: Session, item_id: str) -> Optional[GalleryItem]:
    return db.get(GalleryItem, item_id)


def create_item(db: Session, data: GalleryItemCreate) -> GalleryItem:
    status = data.publish_status or PublishStatus.DRAFT
    if status == PublishStatus.PUBLISHED and not (data.alt_text or "").strip():
        raise DomainValidationError(ALT_TEXT_REQUIRED)

    item = GalleryItem(**data.model_dump(exclude={"publish_status"}), publish_status=status)
    db.add(item)
    db.commit()
    logger.info(f"🖼️ Gallery item created: {item.id} ({item.category.value}, {status.value})")
    return item


def update_item(db: Session, item_id: str, data: GalleryItemUpdate) -> GalleryItem:
    item = db.get(GalleryItem, item_id)
    if not item:
        raise NotFoundError(f'Gallery item with ID "{item_id}" not found')

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    new_status = changes.get("publish_status", item.publish_status)
    new_alt = changes.get("alt_text", item.alt_text)
    if new_status == PublishStatus.PUBLISHED and not (new_alt or "").strip():
        raise DomainValidationError(ALT_TEXT_REQUIRED)

    for key, value in changes.items():
        setattr(item, key, value)
    db.commit()
    logger.info(f"🖼️ Gallery item updated: {item.id}")
    return item


def delete_item(db: Session, item_id: str) -> None:
    item = db.get(GalleryItem, item_id)
    if not item:
        raise NotFoundError(f'Gallery item with ID "{item_id}" not found')
    db.delete(item)
    db.commit()
    logger.info(f"🗑️ Gallery item deleted: {item_id}")
