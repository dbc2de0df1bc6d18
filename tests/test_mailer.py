import smtplib
import socket

from modular_house.services.mailer import Mailer, SMTPConnectionPool, is_retryable


def test_is_retryable():
    assert is_retryable(smtplib.SMTPResponseException(503, b"Service unavailable"))
    assert is_retryable(smtplib.SMTPResponseException(421, b"Connection timeout"))
    assert not is_retryable(smtplib.SMTPResponseException(450, b"Mailbox busy"))
    assert is_retryable(smtplib.SMTPServerDisconnected("gone"))
    assert is_retryable(socket.timeout("timed out"))
    assert is_retryable(ConnectionResetError("reset"))
    assert is_retryable(RuntimeError("network unreachable"))
    assert not is_retryable(ValueError("bad address"))


def test_send_succeeds_on_retry(mailer, smtp_server):
    smtp_server.fail_next(smtplib.SMTPResponseException(503, b"Try again"))

    result = mailer.send_email("someone@example.ie", "Hello", text="Hi")

    assert result.success
    assert result.attempt == 2
    assert result.message_id
    assert smtp_server.recipients() == ["someone@example.ie"]


def test_send_gives_up_after_two_attempts(mailer, smtp_server):
    smtp_server.fail_next(
        smtplib.SMTPResponseException(503, b"Try again"),
        smtplib.SMTPResponseException(503, b"Try again"),
        smtplib.SMTPResponseException(503, b"Try again"),
    )

    result = mailer.send_email("someone@example.ie", "Hello", text="Hi")

    assert not result.success
    assert result.attempt == 2
    assert smtp_server.attempts == 2
    assert result.error


def test_non_retryable_error_fails_once(mailer, smtp_server):
    smtp_server.fail_next(smtplib.SMTPRecipientsRefused({"x@example.ie": (450, b"No such user")}))

    result = mailer.send_email("x@example.ie", "Hello", text="Hi")

    assert not result.success
    assert result.attempt == 1


def test_internal_notification_subject_and_recipient(mailer, smtp_server, settings):
    result = mailer.send_internal_notification("New enquiry", "text", "<p>html</p>")

    assert result.success
    msg = smtp_server.sent[0]
    assert msg["To"] == settings.mail.internal_to
    assert msg["Subject"] == "[Modular House] New enquiry"
    assert msg.is_multipart()


def test_unreachable_server_is_not_ready(settings, smtp_server):
    smtp_server.unreachable = True
    m = Mailer(settings.mail, connection_factory=smtp_server.connect, retry_delay=0)
    try:
        assert m.ensure_ready(timeout=5) is False
        assert m.ready is False
    finally:
        m.close()


def test_pool_recycles_connections(smtp_server):
    pool = SMTPConnectionPool(smtp_server.connect, max_connections=2, max_messages=2)

    for _ in range(3):
        with pool.connection() as conn:
            conn.noop()

    # Third use needed a fresh connection after two messages
    assert smtp_server.connections == 2
    pool.close()


def test_line_breaks_in_subject_are_folded(mailer, smtp_server):
    result = mailer.send_email("a@example.ie", "Hello\nBcc: x@evil.test", text="Hi")

    assert result.success
    msg = smtp_server.sent[0]
    assert msg["Subject"] == "Hello Bcc: x@evil.test"
    assert msg["Bcc"] is None


def test_unbuildable_message_returns_failure(mailer, smtp_server, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("Header values may not contain linefeed or carriage return characters")

    monkeypatch.setattr(mailer, "_build_message", broken)
    result = mailer.send_email("a@example.ie", "Hello", text="Hi")

    assert not result.success
    assert result.attempt == 0
    assert result.error
    assert smtp_server.attempts == 0
