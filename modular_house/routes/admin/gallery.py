from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from modular_house.core.db import get_db
from modular_house.core.permissions import Permission
from modular_house.dependencies.auth import require_permission
from modular_house.middleware.rate_limit import limit_general
from modular_house.models.gallery import GalleryCategory, PublishStatus
from modular_house.schemas.content import GalleryItemCreate, GalleryItemOut, GalleryItemUpdate
from modular_house.services.content import gallery as gallery_service

router = APIRouter(
    prefix="/admin/gallery",
    tags=["admin-gallery"],
    dependencies=[Depends(limit_general)],
)

can_edit = require_permission(Permission.GALLERY_EDIT)
can_delete = require_permission(Permission.GALLERY_DELETE)


def _enum_or_none(enum_cls, value: Optional[str]):
    # Unknown filter values are ignored rather than rejected
    try:
        return enum_cls(value) if value else None
    except ValueError:
        return None


@router.get("", response_model=List[GalleryItemOut])
def list_items(category: Optional[str] = None,
               publish_status: Optional[str] = Query(None, alias="publishStatus"),
               _user=Depends(can_edit), db: Session = Depends(get_db)):
    return gallery_service.list_items(
        db,
        category=_enum_or_none(GalleryCategory, category),
        publish_status=_enum_or_none(PublishStatus, publish_status),
    )


@router.get("/{item_id}", response_model=GalleryItemOut)
def get_item(item_id: str, _user=Depends(can_edit), db: Session = Depends(get_db)):
    item = gallery_service.get_item(db, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Gallery item not found")
    return item


@router.post("", response_model=GalleryItemOut, status_code=201)
def create_item(body: GalleryItemCreate, _user=Depends(can_edit), db: Session = Depends(get_db)):
    return gallery_service.create_item(db, body)


@router.put("/{item_id}", response_model=GalleryItemOut)
def update_item(item_id: str, body: GalleryItemUpdate, _user=Depends(can_edit),
                db: Session = Depends(get_db)):
    return gallery_service.update_item(db, item_id, body)


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, _user=Depends(can_delete), db: Session = Depends(get_db)):
    gallery_service.delete_item(db, item_id)
    return Response(status_code=204)
