"""
Pooled SMTP mailer.

Connections are reused across requests (up to ``MAX_CONNECTIONS`` open at a
time, each recycled after ``MAX_MESSAGES_PER_CONNECTION`` messages). Every send
gets one retry for transient failures; callers always receive an
``EmailResult`` and never an exception, since mail problems must not break a
request that has already been accepted.
"""

import logging
import queue
import smtplib
import socket
import ssl
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Callable, Optional

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_fixed

from modular_house.core.config import MailSettings

logger = logging.getLogger(__name__)

MAX_CONNECTIONS = 5
MAX_MESSAGES_PER_CONNECTION = 100
MAX_ATTEMPTS = 2
RETRY_DELAY_SECONDS = 2.0
CONNECTION_TIMEOUT_SECONDS = 10

RETRYABLE_PHRASES = ("timeout", "connection", "network")


@dataclass
class EmailResult:
    success: bool
    attempt: int
    timestamp: datetime = field(default_factory=datetime.utcnow)
    message_id: Optional[str] = None
    error: Optional[str] = None


def is_retryable(error: BaseException) -> bool:
    """Transient failures: SMTP 5xx replies, dropped or timed out connections."""
    if isinstance(error, smtplib.SMTPResponseException):
        if 500 <= error.smtp_code < 600:
            return True
        response = error.smtp_error
        if isinstance(response, bytes):
            response = response.decode("utf-8", errors="replace")
        return any(phrase in str(response).lower() for phrase in RETRYABLE_PHRASES)

    if isinstance(error, (smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError)):
        return True
    if isinstance(error, (socket.timeout, TimeoutError, ConnectionError)):
        return True

    return any(phrase in str(error).lower() for phrase in RETRYABLE_PHRASES)


class SMTPConnectionPool:
    def __init__(self, factory: Callable[[], smtplib.SMTP],
                 max_connections: int = MAX_CONNECTIONS,
                 max_messages: int = MAX_MESSAGES_PER_CONNECTION):
        self._factory = factory
        self._slots = threading.BoundedSemaphore(max_connections)
        self._idle: "queue.LifoQueue" = queue.LifoQueue()
        self.max_messages = max_messages

    def _checkout(self):
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            return self._factory(), 0

    @staticmethod
    def _discard(conn) -> None:
        try:
            conn.quit()
        except (smtplib.SMTPException, OSError):
            conn.close()

    @contextmanager
    def connection(self):
        with self._slots:
            conn, sent = self._checkout()
            try:
                yield conn
            except BaseException:
                # A connection that failed mid-conversation is never reused
                self._discard(conn)
                raise
            sent += 1
            if sent >= self.max_messages:
                self._discard(conn)
            else:
                self._idle.put((conn, sent))

    def close(self) -> None:
        while True:
            try:
                conn, _ = self._idle.get_nowait()
            except queue.Empty:
                return
            self._discard(conn)


class Mailer:
    def __init__(self, settings: MailSettings,
                 connection_factory: Optional[Callable[[], smtplib.SMTP]] = None,
                 retry_delay: float = RETRY_DELAY_SECONDS):
        self.settings = settings
        self.retry_delay = retry_delay
        self._ready = False

        if not settings.has_auth:
            logger.warning(
                "⚠️ SMTP authentication not configured (MAIL_USER or MAIL_PASS missing). "
                "Email sending may fail if the SMTP server requires authentication."
            )
        if not settings.reject_unauthorized:
            logger.warning("⚠️ MAIL_REJECT_UNAUTHORIZED is false, TLS certificate validation is disabled.")

        self._pool = SMTPConnectionPool(connection_factory or self._open_connection)

        # Verify in the background so the API can start without a mail server
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="smtp-verify")
        self._verification = self._executor.submit(self._verify_connection)

    # === Connections ===
    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self.settings.reject_unauthorized:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _open_connection(self) -> smtplib.SMTP:
        s = self.settings
        if s.secure:
            server = smtplib.SMTP_SSL(s.host, s.port, timeout=CONNECTION_TIMEOUT_SECONDS,
                                      context=self._tls_context())
        else:
            server = smtplib.SMTP(s.host, s.port, timeout=CONNECTION_TIMEOUT_SECONDS)
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls(context=self._tls_context())
                server.ehlo()
        if s.has_auth:
            server.login(s.user, s.password)
        return server

    def _verify_connection(self) -> None:
        try:
            with self._pool.connection() as conn:
                conn.noop()
        except Exception as e:
            self._ready = False
            logger.error(
                f"❌ SMTP connection verification failed for {self.settings.host}:{self.settings.port}"
                f" - email sending will not work: {e}"
            )
            raise
        self._ready = True
        logger.info(
            f"✅ SMTP connection verified ({self.settings.host}:{self.settings.port}, "
            f"secure={self.settings.secure}, auth={self.settings.has_auth})"
        )

    @property
    def ready(self) -> bool:
        return self._ready

    def ensure_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the startup verification finishes; True when mail can be sent."""
        try:
            self._verification.result(timeout=timeout)
        except Exception:
            return False
        return self._ready

    # === Sending ===
    @staticmethod
    def _header_value(value: str) -> str:
        # Folds user-supplied line breaks so they cannot start a new header
        return " ".join(value.splitlines()).strip()

    def _build_message(self, to: str, subject: str, text: Optional[str],
                       html: Optional[str], sender: Optional[str]) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = sender or formataddr((self.settings.from_name, self.settings.from_email))
        msg["To"] = self._header_value(to)
        msg["Subject"] = self._header_value(subject)
        msg["Message-ID"] = make_msgid(domain=self.settings.from_email.rpartition("@")[2] or None)
        msg.set_content(text or "")
        if html:
            msg.add_alternative(html, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with self._pool.connection() as conn:
            conn.send_message(msg)

    def _log_retry(self, retry_state, to: str) -> None:
        error = retry_state.outcome.exception()
        logger.warning(
            f"🔁 Retrying email to {to} "
            f"after transient error: {error} (next attempt {retry_state.attempt_number + 1}, "
            f"delay {self.retry_delay}s)"
        )

    def send_email(self, to: str, subject: str, text: Optional[str] = None,
                   html: Optional[str] = None, sender: Optional[str] = None) -> EmailResult:
        retrying = Retrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception(is_retryable),
            before_sleep=lambda state: self._log_retry(state, to),
            reraise=True,
        )

        attempt_number = 0
        try:
            msg = self._build_message(to, subject, text, html, sender)
            for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    logger.info(f"📤 Sending '{subject}' to {to} (attempt {attempt_number}/{MAX_ATTEMPTS})")
                    self._deliver(msg)
        except Exception as e:
            logger.error(f"❌ Email send failed to {to} after {attempt_number} attempt(s): {e}")
            return EmailResult(success=False, attempt=attempt_number, error=str(e) or type(e).__name__)

        logger.info(f"✅ Email sent: '{subject}' → {to} [{msg['Message-ID']}]")
        return EmailResult(success=True, attempt=attempt_number, message_id=msg["Message-ID"])

    def send_internal_notification(self, subject: str, text: str, html: Optional[str] = None) -> EmailResult:
        return self.send_email(
            to=self.settings.internal_to,
            subject=f"[Modular House] {subject}",
            text=text,
            html=html,
        )

    def send_customer_confirmation(self, customer_email: str, subject: str, text: str,
                                   html: Optional[str] = None) -> EmailResult:
        return self.send_email(to=customer_email, subject=subject, text=text, html=html)

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        self._pool.close()
        logger.info("🛑 Mail connection pool closed")
