"""Create the initial admin user from ADMIN_LOGIN_EMAIL / ADMIN_LOGIN_PASSWORD.

Usage: python -m modular_house.utils.create_admin
"""
import logging
import sys

from modular_house.core.config import load_settings
from modular_house.core.db import build_engine, build_session_factory, init_db
from modular_house.core.errors import ConflictError
from modular_house.services.auth import AuthService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_admin() -> int:
    settings = load_settings()
    engine = build_engine(settings.database_url)
    init_db(engine)
    session_factory = build_session_factory(engine)

    auth = AuthService(settings.security)
    with session_factory() as db:
        try:
            user = auth.create_user(db, settings.admin.email, settings.admin.password)
        except ConflictError:
            logger.info(f"ℹ️ Admin user already exists: {settings.admin.email}")
            return 0

    logger.info(f"✅ Admin user ready: {user.email} (roles={user.roles})")
    return 0


if __name__ == "__main__":
    sys.exit(create_admin())
