from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from modular_house.core.db import get_db
from modular_house.core.permissions import Permission
from modular_house.dependencies.auth import require_permission
from modular_house.middleware.rate_limit import limit_general
from modular_house.schemas.content import RedirectCreate, RedirectOut, RedirectUpdate
from modular_house.services.content import redirects as redirects_service

router = APIRouter(
    prefix="/admin/redirects",
    tags=["admin-redirects"],
    dependencies=[Depends(limit_general)],
)

can_manage = require_permission(Permission.REDIRECTS_MANAGE)


@router.get("", response_model=List[RedirectOut])
def list_redirects(_user=Depends(can_manage), db: Session = Depends(get_db)):
    return redirects_service.list_redirects(db)


@router.get("/{redirect_id}", response_model=RedirectOut)
def get_redirect(redirect_id: str, _user=Depends(can_manage), db: Session = Depends(get_db)):
    redirect = redirects_service.get_redirect(db, redirect_id)
    if not redirect:
        raise HTTPException(status_code=404, detail="Redirect not found")
    return redirect


@router.post("", response_model=RedirectOut, status_code=201)
def create_redirect(body: RedirectCreate, _user=Depends(can_manage), db: Session = Depends(get_db)):
    return redirects_service.create_redirect(db, body)


@router.put("/{redirect_id}", response_model=RedirectOut)
def update_redirect(redirect_id: str, body: RedirectUpdate, _user=Depends(can_manage),
                    db: Session = Depends(get_db)):
    return redirects_service.update_redirect(db, redirect_id, body)


@router.delete("/{redirect_id}", status_code=204)
def delete_redirect(redirect_id: str, _user=Depends(can_manage), db: Session = Depends(get_db)):
    redirects_service.delete_redirect(db, redirect_id)
    return Response(status_code=204)
