import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from modular_house.core.errors import NotFoundError
from modular_house.models.faq import FAQ
from modular_house.schemas.content import FAQCreate, FAQUpdate

logger = logging.getLogger(__name__)


def list_faqs(db: Session) -> List[FAQ]:
    return db.query(FAQ).order_by(FAQ.display_order.asc(), FAQ.created_at.asc()).all()


def get_faq(db: Session, faq_id: str) -> Optional[FAQ]:
    return db.get(FAQ, faq_id)


def create_faq(db: Session, data: FAQCreate) -> FAQ:
    faq = FAQ(
        question=data.question,
        answer=data.answer,
        display_order=data.display_order if data.display_order is not None else 0,
    )
    db.add(faq)
    db.commit()
    logger.info(f"❓ FAQ created: {faq.id}")
    return faq


def update_faq(db: Session, faq_id: str, data: FAQUpdate) -> FAQ:
    faq = db.get(FAQ, faq_id)
    if not faq:
        raise NotFoundError(f'FAQ with ID "{faq_id}" not found')
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(faq, key, value)
    db.commit()
    return faq


def delete_faq(db: Session, faq_id: str) -> None:
    faq = db.get(FAQ, faq_id)
    if not faq:
        raise NotFoundError(f'FAQ with ID "{faq_id}" not found')
    db.delete(faq)
    db.commit()
    logger.info(f"🗑️ FAQ deleted: {faq_id}")
