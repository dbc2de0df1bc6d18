import smtplib

import pytest
from fastapi.testclient import TestClient

from modular_house.core.config import (
    AdminSettings,
    AppSettings,
    MailSettings,
    SecuritySettings,
    Settings,
)
from modular_house.main import create_app
from modular_house.services.auth import AuthService
from modular_house.services.mailer import Mailer

ADMIN_EMAIL = "admin@modularhouse.ie"
EDITOR_EMAIL = "editor@modularhouse.ie"
PASSWORD = "s3cret-pass!"


class FakeSMTP:
    """Stands in for an smtplib.SMTP connection."""

    def __init__(self, server: "FakeSMTPServer"):
        self.server = server
        self.closed = False

    def noop(self):
        if self.server.unreachable:
            raise smtplib.SMTPServerDisconnected("Connection unexpectedly closed")
        return 250, b"OK"

    def send_message(self, msg):
        self.server.attempts += 1
        if self.server.failures:
            raise self.server.failures.pop(0)
        self.server.sent.append(msg)
        return {}

    def quit(self):
        self.closed = True

    def close(self):
        self.closed = True


class FakeSMTPServer:
    def __init__(self):
        self.sent = []
        self.failures = []
        self.attempts = 0
        self.connections = 0
        self.unreachable = False

    def connect(self):
        if self.unreachable:
            raise smtplib.SMTPConnectError(421, b"Service not available")
        self.connections += 1
        return FakeSMTP(self)

    def fail_next(self, *errors):
        self.failures.extend(errors)

    def recipients(self):
        return [msg["To"] for msg in self.sent]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        app=AppSettings(env="test", upload_dir=str(tmp_path / "uploads")),
        database_url="sqlite://",
        mail=MailSettings(
            host="smtp.test",
            from_email="info@modularhouse.ie",
            internal_to="sales@modularhouse.ie",
        ),
        security=SecuritySettings(jwt_secret="test-secret", ip_salt="test-salt"),
        admin=AdminSettings(email=ADMIN_EMAIL, password=PASSWORD),
    )


@pytest.fixture
def smtp_server():
    return FakeSMTPServer()


@pytest.fixture
def mailer(settings, smtp_server):
    m = Mailer(settings.mail, connection_factory=smtp_server.connect, retry_delay=0)
    m.ensure_ready(timeout=5)
    yield m
    m.close()


@pytest.fixture
def app(settings, mailer):
    return create_app(settings, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


def _login_headers(client, app, email, roles):
    auth = AuthService(app.state.settings.security)
    with app.state.session_factory() as session:
        auth.create_user(session, email, PASSWORD, roles=roles)
    res = client.post("/admin/auth/login", json={"email": email, "password": PASSWORD})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def admin_headers(client, app):
    return _login_headers(client, app, ADMIN_EMAIL, ["admin"])


@pytest.fixture
def editor_headers(client, app):
    return _login_headers(client, app, EDITOR_EMAIL, ["editor"])


@pytest.fixture
def enquiry():
    return {
        "firstName": "Aoife",
        "lastName": "Byrne",
        "email": "aoife@example.ie",
        "phone": "+353 87 123 4567",
        "address": "12 Main Street, Naas",
        "eircode": "W91 X2Y3",
        "preferredProduct": "Garden Room",
        "message": "Looking for a 4x5m garden room.",
        "consent": True,
    }
