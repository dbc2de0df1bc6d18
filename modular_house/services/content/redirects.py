import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from modular_house.core.errors import ConflictError, DomainValidationError, NotFoundError
from modular_house.models.redirect import Redirect
from modular_house.schemas.content import RedirectCreate, RedirectUpdate

logger = logging.getLogger(__name__)

DUPLICATE_SOURCE = "Redirect with this source slug already exists"
LOOP_DETECTED = "Redirect loop detected: Destination cannot be the same as source"


def normalize_slug(slug: str) -> str:
    return slug[1:] if slug.startswith("/") else slug


def check_loop(source_slug: str, destination_url: str) -> None:
    slug = normalize_slug(source_slug)
    if destination_url in (slug, f"/{slug}"):
        raise DomainValidationError(LOOP_DETECTED)


def _source_taken(db: Session, slug: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(Redirect.id).filter(Redirect.source_slug == slug)
    if exclude_id:
        query = query.filter(Redirect.id != exclude_id)
    return query.first() is not None


def _commit(db: Session) -> None:
    # The unique index still guards against a concurrent insert
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_SOURCE)


def list_redirects(db: Session) -> List[Redirect]:
    return db.query(Redirect).order_by(Redirect.created_at.desc()).all()


def get_redirect(db: Session, redirect_id: str) -> Optional[Redirect]:
    return db.get(Redirect, redirect_id)


def create_redirect(db: Session, data: RedirectCreate) -> Redirect:
    check_loop(data.source_slug, data.destination_url)
    slug = normalize_slug(data.source_slug)
    if _source_taken(db, slug):
        raise ConflictError(DUPLICATE_SOURCE)

    redirect = Redirect(
        source_slug=slug,
        destination_url=data.destination_url,
        active=data.active if data.active is not None else True,
    )
    db.add(redirect)
    _commit(db)
    logger.info(f"↪️ Redirect created: /{redirect.source_slug} → {redirect.destination_url}")
    return redirect


def update_redirect(db: Session, redirect_id: str, data: RedirectUpdate) -> Redirect:
    redirect = db.get(Redirect, redirect_id)
    if not redirect:
        raise NotFoundError("Redirect not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    new_slug = normalize_slug(changes.get("source_slug", redirect.source_slug))
    new_dest = changes.get("destination_url", redirect.destination_url)
    check_loop(new_slug, new_dest)

    if "source_slug" in changes:
        changes["source_slug"] = new_slug
        if _source_taken(db, new_slug, exclude_id=redirect.id):
            raise ConflictError(DUPLICATE_SOURCE)

    for key, value in changes.items():
        setattr(redirect, key, value)
    _commit(db)
    logger.info(f"↪️ Redirect updated: {redirect.id}")
    return redirect


def delete_redirect(db: Session, redirect_id: str) -> None:
    redirect = db.get(Redirect, redirect_id)
    if not redirect:
        raise NotFoundError("Redirect not found")
    db.delete(redirect)
    db.commit()
    logger.info(f"🗑️ Redirect deleted: {redirect_id}")
