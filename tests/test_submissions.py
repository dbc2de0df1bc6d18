from modular_house.models.customer import Customer
from modular_house.models.note import Note
from modular_house.models.submission import Submission
from modular_house.services import submissions as submissions_service
from modular_house.services.submissions import DEFAULT_CONSENT_TEXT


def test_enquiry_is_stored(client, db, enquiry):
    res = client.post(
        "/submissions/enquiry",
        json=enquiry,
        headers={"Referer": "https://modular.house/garden-rooms/", "X-Forwarded-For": "203.0.113.7"},
    )

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["ok"] is True

    submission = db.get(Submission, body["id"])
    assert submission is not None
    assert submission.source_page_slug == "garden-rooms"
    assert submission.consent_flag is True
    assert submission.consent_text == DEFAULT_CONSENT_TEXT
    assert submission.payload["firstName"] == "Aoife"
    assert submission.payload["preferredProduct"] == "Garden Room"
    assert "website" not in submission.payload

    # Only a keyed hash of the address is kept
    assert submission.ip_hash != "203.0.113.7"
    assert len(submission.ip_hash) == 64

    customer = db.get(Customer, submission.customer_id)
    assert customer.quote_number.startswith("Q")
    assert customer.created_by == "website"
    notes = db.query(Note).filter(Note.customer_id == customer.id).all()
    assert [n.message for n in notes] == [enquiry["message"]]


def test_source_page_defaults_to_contact(client, db, enquiry):
    res = client.post("/submissions/enquiry", json=enquiry)

    assert res.status_code == 200
    assert db.get(Submission, res.json()["id"]).source_page_slug == "contact"


def test_blank_message_creates_no_note(client, db, enquiry):
    enquiry["message"] = "   "
    res = client.post("/submissions/enquiry", json=enquiry)

    assert res.status_code == 200
    assert db.query(Note).count() == 0


def test_honeypot_looks_successful_but_stores_nothing(client, db, enquiry, smtp_server):
    enquiry["website"] = "http://spam.example"
    res = client.post("/submissions/enquiry", json=enquiry)

    assert res.status_code == 200
    assert res.json()["ok"] is True
    assert res.json()["id"]
    assert db.query(Submission).count() == 0
    assert db.query(Customer).count() == 0
    assert smtp_server.sent == []


def test_validation_errors(client, db, enquiry):
    enquiry["email"] = "not-an-email"
    enquiry["consent"] = False
    res = client.post("/submissions/enquiry", json=enquiry)

    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Validation Error"
    assert body["message"] == "The request body contains invalid data"
    fields = {d["field"] for d in body["details"]}
    assert {"email", "consent"} <= fields
    for detail in body["details"]:
        assert detail["message"]
        assert detail["code"]
    assert db.query(Submission).count() == 0


def test_missing_required_field(client, enquiry):
    del enquiry["phone"]
    res = client.post("/submissions/enquiry", json=enquiry)

    assert res.status_code == 400
    assert [d["field"] for d in res.json()["details"]] == ["phone"]


def test_invalid_product(client, enquiry):
    enquiry["preferredProduct"] = "Castle"
    res = client.post("/submissions/enquiry", json=enquiry)

    assert res.status_code == 400
    assert res.json()["details"][0]["field"] == "preferredProduct"


def test_failed_submission_insert_rolls_back_customer_and_note(client, db, enquiry, monkeypatch, smtp_server):
    # A missing consent text violates NOT NULL on the submission row only
    monkeypatch.setattr(submissions_service, "DEFAULT_CONSENT_TEXT", None)

    res = client.post("/submissions/enquiry", json=enquiry)

    assert res.status_code == 500
    assert res.json() == {
        "error": "Internal Server Error",
        "message": "An error occurred while processing your submission. Please try again later.",
    }
    assert db.query(Submission).count() == 0
    assert db.query(Customer).count() == 0
    assert db.query(Note).count() == 0
    assert smtp_server.sent == []
