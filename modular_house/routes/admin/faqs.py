from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from modular_house.core.db import get_db
from modular_house.core.permissions import Permission
from modular_house.dependencies.auth import require_permission
from modular_house.middleware.rate_limit import limit_general
from modular_house.schemas.content import FAQCreate, FAQOut, FAQUpdate
from modular_house.services.content import faqs as faqs_service

router = APIRouter(
    prefix="/admin/faqs",
    tags=["admin-faqs"],
    dependencies=[Depends(limit_general)],
)

can_edit = require_permission(Permission.FAQS_EDIT)
can_delete = require_permission(Permission.FAQS_DELETE)


@router.get("", response_model=List[FAQOut])
def list_faqs(_user=Depends(can_edit), db: Session = Depends(get_db)):
    return faqs_service.list_faqs(db)


@router.get("/{faq_id}", response_model=FAQOut)
def get_faq(faq_id: str, _user=Depends(can_edit), db: Session = Depends(get_db)):
    faq = faqs_service.get_faq(db, faq_id)
    if not faq:
        raise HTTPException(status_code=404, detail="FAQ not found")
    return faq


@router.post("", response_model=FAQOut, status_code=201)
def create_faq(body: FAQCreate, _user=Depends(can_edit), db: Session = Depends(get_db)):
    return faqs_service.create_faq(db, body)


@router.put("/{faq_id}", response_model=FAQOut)
def update_faq(faq_id: str, body: FAQUpdate, _user=Depends(can_edit), db: Session = Depends(get_db)):
    return faqs_service.update_faq(db, faq_id, body)


@router.delete("/{faq_id}", status_code=204)
def delete_faq(faq_id: str, _user=Depends(can_delete), db: Session = Depends(get_db)):
    faqs_service.delete_faq(db, faq_id)
    return Response(status_code=204)
