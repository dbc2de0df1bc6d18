import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import jwt, JWTError, ExpiredSignatureError
from sqlalchemy.orm import Session

from modular_house.core.config import SecuritySettings
from modular_house.core.errors import ConflictError
from modular_house.core.permissions import Role
from modular_house.models.user import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"

_hasher = PasswordHasher()


# === Hashing Utilities ===
def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return _hasher.verify(hashed, plain)
    except (VerificationError, InvalidHashError):
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class AuthResult:
    success: bool
    token: Optional[str] = None
    user: Optional[User] = None
    error: Optional[str] = None


class AuthService:
    def __init__(self, settings: SecuritySettings):
        self.settings = settings

    # === Token Utilities ===
    def create_token(self, user: User) -> str:
        now = datetime.utcnow()
        payload = {
            "userId": str(user.id),
            "email": user.email,
            "roles": list(user.roles or []),
            "iat": now,
            "exp": now + timedelta(minutes=self.settings.jwt_expires_minutes),
        }
        return jwt.encode(payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def verify_token(self, token: str) -> Optional[dict]:
        try:
            return jwt.decode(token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm])
        except ExpiredSignatureError:
            logger.debug("Token expired")
        except JWTError as e:
            logger.debug(f"Invalid token: {e}")
        return None

    # === Auth Logic ===
    def authenticate_user(self, db: Session, email: str, password: str) -> AuthResult:
        normalized = normalize_email(email)
        user = db.query(User).filter(User.email == normalized).first()

        if not user:
            logger.warning(f"⚠️ Authentication failed: user not found ({normalized})")
            return AuthResult(success=False, error=INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            logger.warning(f"⚠️ Authentication failed: invalid password for user {user.id}")
            return AuthResult(success=False, error=INVALID_CREDENTIALS)

        user.last_login_at = datetime.utcnow()
        db.commit()

        logger.info(f"✅ User authenticated: {user.id} ({user.email})")
        return AuthResult(success=True, token=self.create_token(user), user=user)

    def create_user(self, db: Session, email: str, password: str,
                    roles: Optional[List[str]] = None) -> User:
        normalized = normalize_email(email)
        if db.query(User).filter(User.email == normalized).first():
            raise ConflictError("User already exists")

        user = User(
            email=normalized,
            password_hash=hash_password(password),
            roles=roles if roles is not None else [Role.ADMIN.value],
        )
        db.add(user)
        db.commit()

        logger.info(f"✅ User created: {user.id} ({user.email})")
        return user
