import json

import pytest

from unveil.tests.helpers import (
    EVENT_ID, GUEST_TOKEN, GUEST_USER_ID, HOST_TOKEN, OTHER_TOKEN, OTHER_USER_ID, auth_header
)

GUESTS_URL = f"/api/events/{EVENT_ID}/guests"


@pytest.fixture
def guest_rows(fake_db):
    return fake_db.seed(
        "event_guests",
        {"id": "g1", "event_id": EVENT_ID, "guest_name": "Riley", "phone": "+15551234567",
         "rsvp_status": "Pending", "user_id": GUEST_USER_ID},
        {"id": "g2", "event_id": EVENT_ID, "guest_name": "Alex", "phone": "+15559876543",
         "rsvp_status": "Attending", "user_id": None},
    )


def test_host_lists_guests_by_name(client, guest_rows):
    response = client.get(GUESTS_URL, headers=auth_header(HOST_TOKEN))

    assert response.status_code == 200
    assert [g["guest_name"] for g in response.json()] == ["Alex", "Riley"]


def test_guest_can_list(client, guest_rows):
    response = client.get(GUESTS_URL, headers=auth_header(GUEST_TOKEN))

    assert response.status_code == 200


def test_stranger_gets_404(client, guest_rows):
    response = client.get(GUESTS_URL, headers=auth_header(OTHER_TOKEN))

    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found or unauthorized"


def test_missing_token_is_401(client):
    assert client.get(GUESTS_URL).status_code == 401


def test_add_guest_normalizes_phone(client, fake_db):
    response = client.post(GUESTS_URL, headers=auth_header(HOST_TOKEN), json={
        "guest_name": " Jamie Lee ",
        "phone": "(555) 222-3333",
        "guest_email": "",
        "guest_tags": ["family"],
    })

    assert response.status_code == 201
    body = response.json()
    assert body["phone"] == "+15552223333"
    assert body["guest_name"] == "Jamie Lee"
    assert body["guest_email"] is None
    assert body["rsvp_status"] == "Pending"
    assert fake_db.rows("event_guests")[0]["event_id"] == EVENT_ID


def test_add_guest_rejects_duplicate_phone(client, guest_rows):
    response = client.post(GUESTS_URL, headers=auth_header(HOST_TOKEN), json={
        "guest_name": "Again", "phone": "555-123-4567"
    })

    assert response.status_code == 400
    assert response.json()["detail"] == "A guest with this phone number already exists"


def test_add_guest_rejects_bad_phone(client):
    response = client.post(GUESTS_URL, headers=auth_header(HOST_TOKEN), json={
        "guest_name": "Jo", "phone": "12345"
    })

    assert response.status_code == 400
    assert "Invalid phone number format" in response.json()["detail"]


def test_guest_cannot_add_guests(client, guest_rows):
    response = client.post(GUESTS_URL, headers=auth_header(GUEST_TOKEN), json={
        "guest_name": "Jo", "phone": "5550001234"
    })

    assert response.status_code == 404


def test_update_guest(client, guest_rows):
    response = client.put(f"{GUESTS_URL}/g2", headers=auth_header(HOST_TOKEN), json={
        "rsvp_status": "Declined", "sms_opt_out": True
    })

    assert response.status_code == 200
    assert response.json()["rsvp_status"] == "Declined"
    assert response.json()["sms_opt_out"] is True
    assert response.json()["guest_name"] == "Alex"


def test_update_guest_phone_collision(client, guest_rows):
    response = client.put(f"{GUESTS_URL}/g2", headers=auth_header(HOST_TOKEN), json={"phone": "5551234567"})

    assert response.status_code == 400


def test_update_unknown_guest(client, guest_rows):
    response = client.put(f"{GUESTS_URL}/nope", headers=auth_header(HOST_TOKEN), json={"notes": "x"})

    assert response.status_code == 404


def test_remove_guest(client, fake_db, guest_rows):
    response = client.delete(f"{GUESTS_URL}/g2", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 204
    assert [g["id"] for g in fake_db.rows("event_guests")] == ["g1"]
    assert client.delete(f"{GUESTS_URL}/g2", headers=auth_header(HOST_TOKEN)).status_code == 404


def test_guest_updates_own_rsvp(client, fake_db, guest_rows):
    response = client.put(f"{GUESTS_URL}/me/rsvp", headers=auth_header(GUEST_TOKEN), json={"rsvp_status": "Attending"})

    assert response.status_code == 200
    assert response.json()["id"] == "g1"
    assert fake_db.rows("event_guests")[0]["rsvp_status"] == "Attending"


def test_rsvp_requires_invitation(client, guest_rows):
    response = client.put(f"{GUESTS_URL}/me/rsvp", headers=auth_header(OTHER_TOKEN), json={"rsvp_status": "Maybe"})

    assert response.status_code == 404
    assert response.json()["detail"] == "You are not on the guest list for this event"


def test_rsvp_rejects_unknown_status(client, guest_rows):
    response = client.put(f"{GUESTS_URL}/me/rsvp", headers=auth_header(GUEST_TOKEN), json={"rsvp_status": "Sure"})

    assert response.status_code == 400


def test_link_guest_by_phone(client, fake_db, guest_rows):
    response = client.post(f"{GUESTS_URL}/link", headers=auth_header(OTHER_TOKEN), json={"phone": "(555) 987-6543"})

    assert response.status_code == 200
    assert fake_db.rows("event_guests")[1]["user_id"] == OTHER_USER_ID


def test_link_guest_already_claimed(client, guest_rows):
    response = client.post(f"{GUESTS_URL}/link", headers=auth_header(OTHER_TOKEN), json={"phone": "5551234567"})

    assert response.status_code == 400


def test_link_guest_without_invitation(client, guest_rows):
    response = client.post(f"{GUESTS_URL}/link", headers=auth_header(OTHER_TOKEN), json={"phone": "5550000000"})

    assert response.status_code == 404
    assert response.json()["detail"] == "No invitation found for this phone number"


def test_import_template(client):
    response = client.get(f"{GUESTS_URL}/import/template", headers=auth_header(HOST_TOKEN))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "guest-import-template.csv" in response.headers["content-disposition"]
    assert response.text.startswith('"Phone","Name"')


IMPORT_CSV = (
    "Phone,Name,Email\n"
    "(555) 300-0001,Jamie,jamie@example.com\n"
    "5551234567,Already There,\n"
    "bad,Nobody,\n"
).encode()


def test_import_dry_run_writes_nothing(client, fake_db):
    response = client.post(
        f"{GUESTS_URL}/import",
        headers=auth_header(HOST_TOKEN),
        files={"file": ("guests.csv", IMPORT_CSV, "text/csv")},
        data={"dry_run": "true"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["dry_run"] is True
    assert body["imported"] == 0
    assert body["summary"] == {"total": 3, "valid": 2, "invalid": 1, "duplicate_emails": 0}
    assert body["column_mapping"] == {"phone": "phone", "name": "guest_name", "email": "guest_email"}
    assert body["invalid_rows"][0]["row"] == 3
    assert fake_db.rows("event_guests") == []


def test_import_inserts_valid_rows(client, fake_db):
    response = client.post(
        f"{GUESTS_URL}/import",
        headers=auth_header(HOST_TOKEN),
        files={"file": ("guests.csv", IMPORT_CSV, "text/csv")},
    )

    assert response.json()["imported"] == 2
    phones = [g["phone"] for g in fake_db.rows("event_guests")]
    assert phones == ["+15553000001", "+15551234567"]


def test_import_with_explicit_mapping(client, fake_db):
    content = b"Contact,Who\n5553000001,Jamie\n"

    response = client.post(
        f"{GUESTS_URL}/import",
        headers=auth_header(HOST_TOKEN),
        files={"file": ("guests.csv", content, "text/csv")},
        data={"column_mapping": json.dumps({"Contact": "phone", "Who": "guest_name"})},
    )

    assert response.status_code == 200
    assert fake_db.rows("event_guests")[0]["guest_name"] == "Jamie"


def test_import_rejects_other_file_types(client):
    response = client.post(
        f"{GUESTS_URL}/import",
        headers=auth_header(HOST_TOKEN),
        files={"file": ("guests.pdf", b"%PDF", "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "File must be CSV or Excel format"


def test_import_without_phone_column(client):
    response = client.post(
        f"{GUESTS_URL}/import",
        headers=auth_header(HOST_TOKEN),
        files={"file": ("guests.csv", b"Name\nJamie\n", "text/csv")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Could not find a phone number column"


def test_import_rejects_malformed_mapping(client):
    response = client.post(
        f"{GUESTS_URL}/import",
        headers=auth_header(HOST_TOKEN),
        files={"file": ("guests.csv", IMPORT_CSV, "text/csv")},
        data={"column_mapping": "[1, 2]"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "column_mapping must be a JSON object"


def test_import_is_host_only(client, guest_rows):
    response = client.post(
        f"{GUESTS_URL}/import",
        headers=auth_header(GUEST_TOKEN),
        files={"file": ("guests.csv", IMPORT_CSV, "text/csv")},
    )

    assert response.status_code == 404
