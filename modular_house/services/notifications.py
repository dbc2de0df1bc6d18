"""
Post-response email processing for enquiry submissions.

``SubmissionNotifier.process_submission`` is scheduled as a background task once
the enquiry response has been sent. It owns its database session, sends the
internal notification (always) and the customer confirmation (when enabled),
then stores the combined outcome on ``Submission.email_log``.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import sessionmaker

from modular_house.core.config import Settings
from modular_house.core.errors import DomainError
from modular_house.schemas.submission import EmailLog, EmailResultLog, SubmissionPayload
from modular_house.middleware.validation import validate_data
from modular_house.services import email_templates
from modular_house.services import submissions as submissions_service
from modular_house.services.mailer import EmailResult, Mailer

logger = logging.getLogger(__name__)

MAILER_UNAVAILABLE = "Mailer not available"
CONFIRMATION_DISABLED = "Customer confirmation disabled"


def result_to_log(result: EmailResult) -> EmailResultLog:
    if result.success:
        return EmailResultLog(
            status="success",
            sent_at=result.timestamp,
            attempts=result.attempt,
            message_id=result.message_id,
        )
    return EmailResultLog(status="failure", reason=result.error, attempts=result.attempt)


def not_sent(reason: str) -> EmailResultLog:
    return EmailResultLog(status="not-sent", reason=reason, attempts=0)


class SubmissionNotifier:
    def __init__(self, session_factory: sessionmaker, mailer: Mailer, settings: Settings,
                 ready_timeout: Optional[float] = 15.0):
        self.session_factory = session_factory
        self.mailer = mailer
        self.settings = settings
        self.ready_timeout = ready_timeout

        self._lock = threading.Lock()
        self.completed = 0
        self.failed = 0

    def _track(self, ok: bool) -> None:
        with self._lock:
            if ok:
                self.completed += 1
            else:
                self.failed += 1

    def _template_vars(self, submission) -> Optional[dict]:
        check = validate_data(SubmissionPayload, submission.payload)
        if not check.success:
            logger.error(f"❌ Stored payload for submission {submission.id} is invalid: {check.errors}")
            return None
        payload = check.data
        return {
            **payload.model_dump(),
            "submission_id": submission.id,
            "source_page_slug": submission.source_page_slug,
            "quote_number": submission.customer.quote_number if submission.customer else None,
        }

    def _send_internal(self, variables: dict, mail_ok: bool) -> EmailResultLog:
        if not mail_ok:
            return not_sent(MAILER_UNAVAILABLE)
        subject, text, html = email_templates.render_internal(variables)
        return result_to_log(self.mailer.send_internal_notification(subject, text, html))

    def _send_customer(self, variables: dict, mail_ok: bool) -> EmailResultLog:
        if not self.settings.app.customer_confirm_enabled:
            return not_sent(CONFIRMATION_DISABLED)
        if not mail_ok:
            return not_sent(MAILER_UNAVAILABLE)
        subject, text, html = email_templates.render_customer(variables)
        return result_to_log(
            self.mailer.send_customer_confirmation(variables["email"], subject, text, html)
        )

    def process_submission(self, submission_id: str) -> Optional[EmailLog]:
        started = time.monotonic()
        db = self.session_factory()
        try:
            submission = submissions_service.get_by_id(db, submission_id)
            if not submission:
                logger.error(f"❌ Submission {submission_id} vanished before notification")
                self._track(False)
                return None

            variables = self._template_vars(submission)
            if variables is None:
                self._track(False)
                return None

            mail_ok = self.mailer.ensure_ready(timeout=self.ready_timeout)
            if not mail_ok:
                logger.warning(f"⚠️ Mailer not ready, skipping emails for submission {submission_id}")

            email_log = EmailLog(
                internal=self._send_internal(variables, mail_ok),
                customer=self._send_customer(variables, mail_ok),
                processed_at=datetime.utcnow(),
                total_duration_ms=int((time.monotonic() - started) * 1000),
            )

            try:
                submissions_service.update_email_log(db, submission_id, email_log)
            except DomainError as e:
                # The emails already went out; keep the outcome in the log at least
                logger.error(
                    f"❌ Could not persist email log for submission {submission_id}: {e.message} "
                    f"log={email_log.model_dump_json(by_alias=True)}"
                )
                self._track(False)
                return email_log

            logger.info(
                f"✅ Notifications processed for submission {submission_id}: "
                f"internal={email_log.internal.status} customer={email_log.customer.status} "
                f"({email_log.total_duration_ms}ms)"
            )
            self._track(True)
            return email_log
        finally:
            db.close()
