import csv
import io
from datetime import datetime
from types import SimpleNamespace

from modular_house.services.submissions_export import CSV_HEADERS, escape_csv_field, to_csv


def test_escape_csv_field():
    assert escape_csv_field(None) == ""
    assert escape_csv_field("plain") == "plain"
    assert escape_csv_field("a,b") == '"a,b"'
    assert escape_csv_field('say "hi"') == '"say ""hi"""'
    assert escape_csv_field("line1\nline2") == '"line1\nline2"'
    assert escape_csv_field("line1\rline2") == '"line1\rline2"'
    assert escape_csv_field("") == ""
    assert escape_csv_field(42) == "42"


def test_to_csv_rows():
    sub = SimpleNamespace(
        id="s1",
        created_at=datetime(2025, 10, 1, 12, 0, 0),
        source_page_slug="contact",
        payload={"firstName": "Seán", "email": "sean@example.ie", "phone": "087", "message": 'Hi, "there"'},
        consent_flag=True,
        consent_text="I consent",
        ip_hash="abc",
        user_agent=None,
    )

    lines = to_csv([sub]).split("\n")

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == (
        's1,2025-10-01T12:00:00,contact,Seán,,sean@example.ie,087,,,,"Hi, ""there""",true,I consent,abc,'
    )


def test_to_csv_keeps_multiline_message_in_one_field():
    sub = SimpleNamespace(
        id="s2",
        created_at=datetime(2025, 10, 2),
        source_page_slug="contact",
        payload={"message": "line one\nline two"},
        consent_flag=False,
        consent_text="",
        ip_hash="h",
        user_agent="ua",
    )

    rows = list(csv.reader(io.StringIO(to_csv([sub]))))

    assert len(rows) == 2
    assert rows[1][10] == "line one\nline two"
    assert rows[1][11] == "false"


def test_export_endpoint(client, admin_headers, enquiry):
    client.post("/submissions/enquiry", json=enquiry)

    res = client.get("/admin/submissions/export", headers=admin_headers)

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    today = datetime.utcnow().strftime("%Y-%m-%d")
    assert res.headers["content-disposition"] == f'attachment; filename="submissions-{today}.csv"'
    lines = res.text.split("\n")
    assert len(lines) == 2
    assert "aoife@example.ie" in lines[1]


def test_export_requires_admin(client, editor_headers):
    res = client.get("/admin/submissions/export", headers=editor_headers)

    assert res.status_code == 403
    assert res.json() == {"error": "Forbidden", "message": "Insufficient permissions"}


def test_list_and_get_submissions(client, editor_headers, enquiry):
    ids = [client.post("/submissions/enquiry", json=enquiry).json()["id"] for _ in range(3)]

    res = client.get("/admin/submissions", params={"page": 2, "limit": 2}, headers=editor_headers)

    assert res.status_code == 200
    body = res.json()
    assert body["meta"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}
    assert len(body["data"]) == 1

    detail = client.get(f"/admin/submissions/{ids[0]}", headers=editor_headers)
    assert detail.status_code == 200
    assert detail.json()["payload"]["email"] == enquiry["email"]
    assert detail.json()["emailLog"]["internal"]["status"] == "success"

    missing = client.get("/admin/submissions/nope", headers=editor_headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Not found", "message": "Submission not found"}


def test_list_filters_by_source_page(client, admin_headers, enquiry):
    client.post("/submissions/enquiry", json=enquiry, headers={"Referer": "https://modular.house/garden-rooms"})
    client.post("/submissions/enquiry", json=enquiry)

    res = client.get("/admin/submissions", params={"sourcePageSlug": "garden-rooms"}, headers=admin_headers)

    assert res.json()["meta"]["total"] == 1
    assert res.json()["data"][0]["sourcePageSlug"] == "garden-rooms"
