import logging
import re
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from modular_house.core.errors import NotFoundError, ServiceError
from modular_house.models.customer import Customer
from modular_house.models.note import Note
from modular_house.models.submission import Submission
from modular_house.schemas.submission import EmailLog, SubmissionPayload

logger = logging.getLogger(__name__)

DEFAULT_CONSENT_TEXT = (
    "I consent to the processing of my personal data for the purpose of handling my enquiry "
    "and providing information about your products and services."
)
WEBSITE_SOURCE = "website"

QUOTE_NUMBER_PATTERN = re.compile(r"^Q(\d{2})([1-4])(\d{4,})$")


# === Quote numbers ===
def quote_bucket(now: datetime) -> Tuple[int, int]:
    return now.year % 100, (now.month - 1) // 3 + 1


def next_quote_number(latest: Optional[str], now: datetime) -> str:
    """Q + 2-digit year + quarter + 4-digit sequence, restarting at 1 each quarter."""
    year, quarter = quote_bucket(now)
    sequence = 1

    if latest:
        match = QUOTE_NUMBER_PATTERN.match(latest)
        if not match:
            logger.warning(f"⚠️ Unrecognised quote number {latest!r}, restarting sequence")
        elif (int(match.group(1)), int(match.group(2))) >= (year, quarter):
            sequence = int(match.group(3)) + 1

    return f"Q{year:02d}{quarter}{sequence:04d}"


def latest_quote_number(db: Session) -> Optional[str]:
    row = (
        db.query(Customer.quote_number)
        .order_by(Customer.created_at.desc(), Customer.quote_number.desc())
        .limit(1)
        .with_for_update()
        .first()
    )
    return row[0] if row else None


# === Create ===
@retry(
    stop=stop_after_attempt(3),
    retry=retry_if_exception_type(IntegrityError),
    reraise=True,
)
def _insert_records(db: Session, payload: SubmissionPayload, source_page_slug: str,
                    ip_hash: str, user_agent: str, consent_text: str, now: datetime) -> Submission:
    # A concurrent enquiry can claim the same quote number; the unique index
    # rejects it and the whole transaction is replayed.
    try:
        quote_number = next_quote_number(latest_quote_number(db), now)

        customer = Customer(
            quote_number=quote_number,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            phone=payload.phone,
            address=payload.address,
            eircode=payload.eircode,
            product=payload.preferred_product,
            status="active",
            created_by=WEBSITE_SOURCE,
        )
        db.add(customer)
        db.flush()

        if payload.message and payload.message.strip():
            db.add(Note(
                customer_id=customer.id,
                message=payload.message,
                source="enquiry",
                created_by=WEBSITE_SOURCE,
            ))

        submission = Submission(
            customer_id=customer.id,
            payload=payload.model_dump(by_alias=True, mode="json"),
            source_page_slug=source_page_slug,
            consent_flag=payload.consent,
            consent_text=consent_text,
            ip_hash=ip_hash,
            user_agent=user_agent,
            email_log=None,
        )
        db.add(submission)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    return submission


def create(db: Session, payload: SubmissionPayload, source_page_slug: str, ip_hash: str,
           user_agent: str, consent_text: Optional[str] = None,
           now: Optional[datetime] = None) -> Submission:
    logger.info(
        f"📥 Creating submission for {payload.email} from '{source_page_slug}' "
        f"(product={payload.preferred_product}, has_message={bool(payload.message)})"
    )
    try:
        submission = _insert_records(
            db, payload, source_page_slug, ip_hash, user_agent,
            consent_text or DEFAULT_CONSENT_TEXT, now or datetime.utcnow(),
        )
    except SQLAlchemyError:
        logger.exception(f"❌ Failed to create submission record for {payload.email}")
        raise ServiceError("Failed to create submission record")

    logger.info(f"✅ Submission {submission.id} stored (customer {submission.customer_id})")
    return submission


# === Email log ===
def update_email_log(db: Session, submission_id: str, email_log: EmailLog) -> None:
    try:
        submission = db.get(Submission, submission_id)
        if not submission:
            raise NotFoundError(f"Submission {submission_id} not found")
        submission.email_log = email_log.model_dump(by_alias=True, mode="json", exclude_none=True)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"❌ Failed to update email log for submission {submission_id}")
        raise ServiceError("Failed to update email log")

    logger.info(f"📝 Email log updated for submission {submission_id}")


# === Queries ===
def get_by_id(db: Session, submission_id: str) -> Optional[Submission]:
    return db.get(Submission, submission_id)


def _filtered(db: Session, since: Optional[datetime], source_page_slug: Optional[str]):
    query = db.query(Submission)
    if since:
        query = query.filter(Submission.created_at >= since)
    if source_page_slug:
        query = query.filter(Submission.source_page_slug == source_page_slug)
    return query


def list_submissions(db: Session, since: Optional[datetime] = None, limit: int = 50,
                     offset: int = 0, source_page_slug: Optional[str] = None
                     ) -> Tuple[List[Submission], int]:
    query = _filtered(db, since, source_page_slug)
    total = query.with_entities(func.count(Submission.id)).scalar()
    items = (
        query.order_by(Submission.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def get_for_export(db: Session, since: Optional[datetime] = None,
                   source_page_slug: Optional[str] = None) -> List[Submission]:
    items = _filtered(db, since, source_page_slug).order_by(Submission.created_at.desc()).all()
    logger.info(f"📦 Retrieved {len(items)} submissions for export (since={since})")
    return items
