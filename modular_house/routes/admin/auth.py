import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from modular_house.core.db import get_db
from modular_house.dependencies.auth import bearer_token, get_auth_service
from modular_house.middleware.rate_limit import limit_general
from modular_house.schemas.user import LoginResponse, UserLogin, UserOut
from modular_house.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/auth",
    tags=["admin-auth"],
    dependencies=[Depends(limit_general)],
)


# === Login ===
@router.post("/login", response_model=LoginResponse)
def login(payload: UserLogin, db: Session = Depends(get_db),
          auth: AuthService = Depends(get_auth_service)):
    result = auth.authenticate_user(db, payload.email, payload.password)
    if not result.success:
        # Same answer for unknown email and wrong password
        raise HTTPException(
            status_code=401,
            detail={"error": "Invalid credentials", "message": "Authentication failed"},
        )

    return LoginResponse(token=result.token, user=UserOut.model_validate(result.user))


# === Logout ===
@router.post("/logout", status_code=204)
def logout(authorization: Optional[str] = Header(None),
           auth: AuthService = Depends(get_auth_service)):
    # Tokens are stateless, the client simply discards it
    token = bearer_token(authorization)
    payload = auth.verify_token(token) if token else None
    if payload:
        logger.info(f"👋 Admin logout: {payload.get('userId')} ({payload.get('email')})")
    return Response(status_code=204)
