import csv
import io
from typing import Iterable, Optional

from modular_house.models.submission import Submission

CSV_HEADERS = [
    "ID",
    "Created At",
    "Source Page",
    "First Name",
    "Last Name",
    "Email",
    "Phone",
    "Address",
    "Eircode",
    "Product",
    "Message",
    "Consent",
    "Consent Text",
    "IP Hash",
    "User Agent",
]


def escape_csv_field(value: Optional[object]) -> str:
    """One field as it appears in the export: quoted when it holds a comma, quote or line break."""
    if value is None or value == "":
        return ""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\r\n").writerow([value])
    return buffer.getvalue()[:-2]


def submission_row(sub: Submission) -> list:
    payload = sub.payload or {}
    return [
        sub.id,
        sub.created_at.isoformat(),
        sub.source_page_slug,
        payload.get("firstName"),
        payload.get("lastName"),
        payload.get("email"),
        payload.get("phone"),
        payload.get("address"),
        payload.get("eircode"),
        payload.get("preferredProduct"),
        payload.get("message"),
        "true" if sub.consent_flag else "false",
        sub.consent_text,
        sub.ip_hash,
        sub.user_agent,
    ]


def to_csv(submissions: Iterable[Submission]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for sub in submissions:
        writer.writerow(["" if field is None else field for field in submission_row(sub)])
    # No trailing newline after the last row
    return output.getvalue().rstrip("\n")
