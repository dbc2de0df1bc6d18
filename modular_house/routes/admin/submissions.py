import logging
import math
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from modular_house.core.db import get_db
from modular_house.core.permissions import Permission
from modular_house.dependencies.auth import require_permission
from modular_house.middleware.rate_limit import limit_general
from modular_house.schemas.submission import PageMeta, SubmissionList, SubmissionOut
from modular_house.schemas.user import TokenPayload
from modular_house.services import submissions as submissions_service
from modular_house.services.submissions_export import to_csv

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/submissions",
    tags=["admin-submissions"],
    dependencies=[Depends(limit_general)],
)


@router.get("", response_model=SubmissionList)
def list_submissions(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    since: Optional[datetime] = None,
    source_page_slug: Optional[str] = Query(None, alias="sourcePageSlug"),
    _user=Depends(require_permission(Permission.SUBMISSIONS_READ)),
    db: Session = Depends(get_db),
):
    items, total = submissions_service.list_submissions(
        db,
        since=since,
        limit=limit,
        offset=(page - 1) * limit,
        source_page_slug=source_page_slug,
    )
    return SubmissionList(
        data=[SubmissionOut.model_validate(s) for s in items],
        meta=PageMeta(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit)),
    )


# Declared before /{submission_id} so "export" is not taken as an id
@router.get("/export")
def export_submissions(
    since: Optional[datetime] = None,
    source_page_slug: Optional[str] = Query(None, alias="sourcePageSlug"),
    user: TokenPayload = Depends(require_permission(Permission.SUBMISSIONS_EXPORT)),
    db: Session = Depends(get_db),
):
    submissions = submissions_service.get_for_export(db, since=since, source_page_slug=source_page_slug)
    filename = f"submissions-{datetime.utcnow().strftime('%Y-%m-%d')}.csv"
    logger.info(f"📤 Exporting {len(submissions)} submissions for {user.email}")
    return Response(
        content=to_csv(submissions),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{submission_id}", response_model=SubmissionOut)
def get_submission(
    submission_id: str,
    _user=Depends(require_permission(Permission.SUBMISSIONS_READ)),
    db: Session = Depends(get_db),
):
    submission = submissions_service.get_by_id(db, submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission
