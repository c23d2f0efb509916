from unveil.database import supabase_client
from unveil.main import app
from unveil.tests.fakes import FakeAPIError

WEBHOOK_URL = "/api/webhooks/twilio"


def test_status_callback_updates_delivery(client, fake_db):
    fake_db.seed(
        "message_deliveries",
        {"id": "d1", "guest_id": "g1", "sms_provider_id": "SMabc", "sms_status": "sent"},
        {"id": "d2", "guest_id": "g2", "sms_provider_id": "SMother", "sms_status": "sent"},
    )

    response = client.post(WEBHOOK_URL, data={
        "MessageSid": "SMabc",
        "MessageStatus": "undelivered",
        "To": "+15551234567",
        "ErrorCode": "30003",
        "ErrorMessage": "Unreachable destination handset",
    })

    assert response.status_code == 200
    assert response.json() == {"success": True}
    first, second = fake_db.rows("message_deliveries")
    assert first["sms_status"] == "undelivered"
    assert first["error_code"] == "30003"
    assert first["error_message"] == "Unreachable destination handset"
    assert first["updated_at"]
    assert second["sms_status"] == "sent"


def test_missing_error_fields_are_stored_as_null(client, fake_db):
    fake_db.seed("message_deliveries", {"id": "d1", "sms_provider_id": "SMabc", "sms_status": "sent"})

    client.post(WEBHOOK_URL, data={"MessageSid": "SMabc", "MessageStatus": "delivered"})

    delivery = fake_db.rows("message_deliveries")[0]
    assert delivery["sms_status"] == "delivered"
    assert delivery["error_code"] is None
    assert delivery["error_message"] is None


def test_callback_without_sid_is_acknowledged(client, fake_db):
    response = client.post(WEBHOOK_URL, data={"MessageStatus": "delivered"})

    assert response.json() == {"success": True}
    assert ("message_deliveries", "update") not in [call[:2] for call in fake_db.calls]


def test_database_failure_still_answers_200(client, fake_db):
    fake_db.fail("message_deliveries", "update", FakeAPIError("connection reset"))

    response = client.post(WEBHOOK_URL, data={"MessageSid": "SMabc", "MessageStatus": "failed"})

    assert response.status_code == 200
    assert response.json() == {"success": False}


def test_unconfigured_database_still_answers_200(client, monkeypatch):
    def refuse(url, key, options=None):
        raise ValueError("supabase_url is required")

    monkeypatch.setattr(supabase_client, "create_client", refuse)
    monkeypatch.setattr(supabase_client.SupabaseClient, "_client", None)
    monkeypatch.setattr(supabase_client.SupabaseClient, "_service_client", None)
    app.dependency_overrides.pop(supabase_client.get_optional_service_supabase)

    response = client.post(WEBHOOK_URL, data={"MessageSid": "SMabc", "MessageStatus": "delivered"})

    assert response.status_code == 200
    assert response.json() == {"success": False}
