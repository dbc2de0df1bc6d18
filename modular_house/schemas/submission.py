from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from modular_house.schemas.common import CamelModel

PRODUCT_OPTIONS = ("Garden Room", "House Extension")

Product = Literal["Garden Room", "House Extension"]
EmailStatus = Literal["success", "failure", "not-sent"]


class SubmissionPayload(CamelModel):
    """Form fields stored on the submission record."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20, pattern=r"^[\d\s\-+()]+$")
    address: Optional[str] = Field(None, max_length=500)
    eircode: Optional[str] = Field(None, max_length=10, pattern=r"^[A-Za-z0-9\s]+$")
    preferred_product: Optional[Product] = None
    message: Optional[str] = Field(None, max_length=2000)
    consent: Literal[True]

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value: str) -> str:
        if len(value) > 255:
            raise ValueError("Email must be at most 255 characters")
        return value


class EnquirySubmission(SubmissionPayload):
    # Honeypot, real visitors never see this input
    website: Optional[str] = None

    def to_payload(self) -> SubmissionPayload:
        return SubmissionPayload.model_validate(self.model_dump(exclude={"website"}))


class EnquiryResponse(CamelModel):
    ok: bool = True
    id: str


# === Email outcome log ===
class EmailResultLog(CamelModel):
    status: EmailStatus
    reason: Optional[str] = None
    sent_at: Optional[datetime] = None
    attempts: int = Field(0, ge=0)
    message_id: Optional[str] = None


class EmailLog(CamelModel):
    internal: EmailResultLog
    customer: Optional[EmailResultLog] = None
    processed_at: datetime
    total_duration_ms: Optional[int] = Field(None, ge=0)


# === Admin views ===
class SubmissionOut(CamelModel):
    id: str
    customer_id: Optional[str] = None
    payload: Dict[str, Any]
    source_page_slug: str
    consent_flag: bool
    consent_text: str
    ip_hash: str
    user_agent: Optional[str] = None
    email_log: Optional[Dict[str, Any]] = None
    created_at: datetime


class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class SubmissionList(CamelModel):
    data: List[SubmissionOut]
    meta: PageMeta
