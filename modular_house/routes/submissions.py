import logging
from uuid import uuid4

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from modular_house.core.db import get_db
from modular_house.core.errors import ServiceError
from modular_house.middleware.rate_limit import limit_submissions
from modular_house.schemas.submission import EnquiryResponse, EnquirySubmission
from modular_house.services import submissions as submissions_service
from modular_house.utils.client import (
    DEFAULT_SOURCE_PAGE,
    extract_slug_from_referer,
    get_client_ip,
    hash_ip,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/submissions/enquiry",
    response_model=EnquiryResponse,
    dependencies=[Depends(limit_submissions)],
)
def create_enquiry(
    payload: EnquirySubmission,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    client_ip = get_client_ip(request) or ""
    user_agent = request.headers.get("user-agent", "")

    # Honeypot: answer exactly like a success so bots learn nothing
    if payload.website and payload.website.strip():
        logger.warning(
            f"🍯 Honeypot triggered - dropping submission (ip={client_ip}, ua={user_agent[:100]})"
        )
        return EnquiryResponse(ok=True, id=str(uuid4()))

    settings = request.app.state.settings
    ip_hash = hash_ip(client_ip, settings.security.ip_salt)
    source_page_slug = extract_slug_from_referer(request.headers.get("referer")) or DEFAULT_SOURCE_PAGE

    try:
        submission = submissions_service.create(
            db,
            payload.to_payload(),
            source_page_slug=source_page_slug,
            ip_hash=ip_hash,
            user_agent=user_agent,
        )
    except ServiceError:
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": "An error occurred while processing your submission. Please try again later.",
            },
        )

    # Runs after the response has been sent
    background_tasks.add_task(request.app.state.notifier.process_submission, submission.id)

    logger.info(
        f"✅ Enquiry accepted: submission={submission.id} page={source_page_slug} "
        f"ip_hash={ip_hash[:8]}... ua={user_agent[:100]}"
    )
    return EnquiryResponse(ok=True, id=submission.id)
