import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from modular_house.core.permissions import Permission, authorize
from modular_house.schemas.user import TokenPayload
from modular_house.services.auth import AuthService

# === Setup logging
logger = logging.getLogger(__name__)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


# === Auth Dependency
def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    auth: AuthService = Depends(get_auth_service),
) -> TokenPayload:
    ip = request.client.host if request.client else "unknown"
    token = bearer_token(authorization)
    if not token:
        logger.debug(f"No token provided for protected route (ip={ip})")
        raise HTTPException(
            status_code=401,
            detail={"error": "Unauthorized", "message": "Authentication required"},
        )

    payload = auth.verify_token(token)
    if not payload or not payload.get("userId"):
        logger.warning(f"⚠️ Invalid or expired token provided (ip={ip})")
        raise HTTPException(
            status_code=401,
            detail={"error": "Unauthorized", "message": "Invalid or expired token"},
        )

    return TokenPayload.model_validate(payload)


# === Authorization Dependency
def require_permission(permission: Permission):
    def checker(user: TokenPayload = Depends(get_current_user)) -> TokenPayload:
        if not authorize(user.roles, permission):
            logger.warning(
                f"⚠️ Insufficient permissions: user={user.user_id} roles={user.roles} "
                f"required={permission.value}"
            )
            raise HTTPException(
                status_code=403,
                detail={"error": "Forbidden", "message": "Insufficient permissions"},
            )
        return user

    return checker
