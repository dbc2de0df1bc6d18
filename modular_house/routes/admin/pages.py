import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from modular_house.core.db import get_db
from modular_house.core.permissions import Permission
from modular_house.dependencies.auth import require_permission
from modular_house.middleware.rate_limit import limit_general
from modular_house.schemas.content import PageCreate, PageOut, PageUpdate
from modular_house.schemas.user import TokenPayload
from modular_house.services.content import pages as pages_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/pages",
    tags=["admin-pages"],
    dependencies=[Depends(limit_general)],
)

can_manage = require_permission(Permission.PAGES_MANAGE)


@router.get("", response_model=List[PageOut])
def list_pages(_user=Depends(can_manage), db: Session = Depends(get_db)):
    return pages_service.list_pages(db)


@router.get("/{page_id}", response_model=PageOut)
def get_page(page_id: str, _user=Depends(can_manage), db: Session = Depends(get_db)):
    page = pages_service.get_page(db, page_id)
    if not page:
        raise HTTPException(status_code=404, detail="Page not found")
    return page


@router.post("", response_model=PageOut, status_code=201)
def create_page(body: PageCreate, user: TokenPayload = Depends(can_manage), db: Session = Depends(get_db)):
    page = pages_service.create_page(db, body)
    logger.info(f"Page {page.id} created by {user.email}")
    return page


@router.put("/{page_id}", response_model=PageOut)
def update_page(page_id: str, body: PageUpdate, user: TokenPayload = Depends(can_manage),
                db: Session = Depends(get_db)):
    page = pages_service.update_page(db, page_id, body)
    logger.info(f"Page {page.id} updated by {user.email}")
    return page


@router.delete("/{page_id}", status_code=204)
def delete_page(page_id: str, user: TokenPayload = Depends(can_manage), db: Session = Depends(get_db)):
    pages_service.delete_page(db, page_id)
    logger.info(f"Page {page_id} deleted by {user.email}")
    return Response(status_code=204)
