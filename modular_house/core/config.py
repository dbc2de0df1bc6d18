# modular_house/core/config.py

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel

from modular_house.core.errors import ConfigError

DEFAULT_JWT_SECRET = "your-jwt-secret-key-change-in-production"
DEFAULT_IP_SALT = "default-salt-change-in-production"
DEFAULT_ADMIN_EMAIL = "testadmin@modular.house"
DEFAULT_ADMIN_PASSWORD = "admin123!"


# === Env helpers ===
def get_env(name: str, default: str) -> str:
    return os.getenv(name) or default


def get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"Required environment variable {name} is not set")
    return value


def get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"Environment variable {name} must be a valid number")


def get_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if not value:
        return default
    return value.strip().lower() == "true"


# === Settings ===
class AppSettings(BaseModel):
    port: int = 8080
    env: str = "development"
    cors_origins: List[str] = ["http://localhost:5173"]
    log_level: str = "INFO"
    customer_confirm_enabled: bool = True
    upload_dir: str = "public/uploads"

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_development(self) -> bool:
        return self.env == "development"


class MailSettings(BaseModel):
    host: str
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = ""
    from_name: str = "Modular House"
    from_email: str
    internal_to: str
    reject_unauthorized: bool = True

    @property
    def has_auth(self) -> bool:
        return bool(self.user and self.password)


class SecuritySettings(BaseModel):
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 24 * 60
    ip_salt: str = DEFAULT_IP_SALT
    rate_limit_exempt_unknown_ip: bool = False


class AdminSettings(BaseModel):
    email: str = DEFAULT_ADMIN_EMAIL
    password: str = DEFAULT_ADMIN_PASSWORD


class Settings(BaseModel):
    app: AppSettings
    database_url: str
    mail: MailSettings
    security: SecuritySettings
    admin: AdminSettings = AdminSettings()


def validate_production(settings: Settings) -> None:
    if not settings.app.is_production:
        return
    if settings.security.jwt_secret == DEFAULT_JWT_SECRET:
        raise ConfigError("JWT_SECRET must be changed from default value in production")
    if settings.security.ip_salt == DEFAULT_IP_SALT:
        raise ConfigError("IP_SALT must be set in production")
    if settings.admin.email == DEFAULT_ADMIN_EMAIL:
        raise ConfigError("ADMIN_LOGIN_EMAIL must be changed from default value in production")
    if settings.admin.password == DEFAULT_ADMIN_PASSWORD:
        raise ConfigError("ADMIN_LOGIN_PASSWORD must be changed from default value in production")


def load_settings() -> Settings:
    load_dotenv()

    origins = get_env("CORS_ORIGIN", "http://localhost:5173")
    settings = Settings(
        app=AppSettings(
            port=get_int_env("PORT", 8080),
            env=get_env("ENV", "development"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=get_env("LOG_LEVEL", "INFO").upper(),
            customer_confirm_enabled=get_bool_env("CUSTOMER_CONFIRM_ENABLED", True),
            upload_dir=get_env("UPLOAD_DIR", "public/uploads"),
        ),
        database_url=get_required_env("DATABASE_URL"),
        mail=MailSettings(
            host=get_required_env("MAIL_HOST"),
            port=get_int_env("MAIL_PORT", 587),
            secure=get_bool_env("MAIL_SECURE", False),
            user=get_env("MAIL_USER", ""),
            password=get_env("MAIL_PASS", ""),
            from_name=get_env("MAIL_FROM_NAME", "Modular House"),
            from_email=get_required_env("MAIL_FROM_EMAIL"),
            internal_to=get_required_env("MAIL_INTERNAL_TO"),
            reject_unauthorized=get_bool_env("MAIL_REJECT_UNAUTHORIZED", True),
        ),
        security=SecuritySettings(
            jwt_secret=get_required_env("JWT_SECRET"),
            jwt_expires_minutes=get_int_env("JWT_EXPIRES_MINUTES", 24 * 60),
            ip_salt=get_env("IP_SALT", DEFAULT_IP_SALT),
            rate_limit_exempt_unknown_ip=get_bool_env("RATE_LIMIT_EXEMPT_UNKNOWN_IP", False),
        ),
        admin=AdminSettings(
            email=get_env("ADMIN_LOGIN_EMAIL", DEFAULT_ADMIN_EMAIL),
            password=get_env("ADMIN_LOGIN_PASSWORD", DEFAULT_ADMIN_PASSWORD),
        ),
    )

    validate_production(settings)
    return settings
