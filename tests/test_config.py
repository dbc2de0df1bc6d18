import pytest

from modular_house.core.config import (
    DEFAULT_JWT_SECRET,
    get_bool_env,
    get_int_env,
    load_settings,
)
from modular_house.core.errors import ConfigError

BASE_ENV = {
    "DATABASE_URL": "sqlite://",
    "MAIL_HOST": "smtp.test",
    "MAIL_FROM_EMAIL": "info@modularhouse.ie",
    "MAIL_INTERNAL_TO": "sales@modularhouse.ie",
    "JWT_SECRET": "dev-secret",
}


@pytest.fixture
def env(monkeypatch):
    for key in ("ENV", "PORT", "CORS_ORIGIN", "IP_SALT", "ADMIN_LOGIN_EMAIL", "ADMIN_LOGIN_PASSWORD",
                "MAIL_PORT", "RATE_LIMIT_EXEMPT_UNKNOWN_IP", "CUSTOMER_CONFIRM_ENABLED"):
        monkeypatch.delenv(key, raising=False)
    for key, value in BASE_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


def test_defaults(env):
    settings = load_settings()
    assert settings.app.env == "development"
    assert settings.app.port == 8080
    assert settings.mail.port == 587
    assert settings.mail.secure is False
    assert settings.mail.has_auth is False
    assert settings.security.rate_limit_exempt_unknown_ip is False
    assert settings.app.customer_confirm_enabled is True


def test_cors_origins_are_split(env):
    env.setenv("CORS_ORIGIN", "https://modular.house, https://www.modular.house")
    assert load_settings().app.cors_origins == ["https://modular.house", "https://www.modular.house"]


def test_missing_required_variable(env):
    env.delenv("MAIL_HOST")
    with pytest.raises(ConfigError, match="MAIL_HOST"):
        load_settings()


def test_invalid_number(env):
    env.setenv("PORT", "eighty")
    with pytest.raises(ConfigError, match="PORT"):
        load_settings()


def test_production_rejects_default_secrets(env):
    env.setenv("ENV", "production")
    env.setenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    with pytest.raises(ConfigError, match="JWT_SECRET"):
        load_settings()

    env.setenv("JWT_SECRET", "real-secret")
    with pytest.raises(ConfigError, match="IP_SALT"):
        load_settings()

    env.setenv("IP_SALT", "real-salt")
    env.setenv("ADMIN_LOGIN_EMAIL", "owner@modular.house")
    env.setenv("ADMIN_LOGIN_PASSWORD", "a-long-password")
    assert load_settings().app.is_production


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "TRUE")
    assert get_bool_env("FLAG", False) is True
    monkeypatch.setenv("FLAG", "yes")
    assert get_bool_env("FLAG", True) is False
    monkeypatch.delenv("FLAG")
    assert get_bool_env("FLAG", True) is True
    monkeypatch.setenv("COUNT", "12")
    assert get_int_env("COUNT", 1) == 12
