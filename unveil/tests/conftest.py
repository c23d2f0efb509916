import httpx
import pytest
from fastapi.testclient import TestClient

from unveil.config import settings
from unveil.core.rate_limit import limiter
from unveil.database.supabase_client import (
    get_optional_service_supabase, get_service_supabase, get_session_client_factory, get_supabase
)
from unveil.main import app
from unveil.modules.auth.service import clear_auth_cache
from unveil.modules.sms.client import TwilioClient, get_twilio_client
from unveil.tests.fakes import FakeSupabase
from unveil.tests.helpers import (
    EVENT_ID, GUEST_TOKEN, GUEST_USER_ID, HOST_ID, HOST_TOKEN, OTHER_TOKEN, OTHER_USER_ID, TwilioRecorder
)


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    clear_auth_cache()
    monkeypatch.setattr(settings, "sms_send_delay_ms", 0)
    monkeypatch.setattr(settings, "cron_secret", None)
    monkeypatch.setattr(settings, "environment", "development")
    limiter.enabled = False
    yield
    limiter.enabled = settings.rate_limit_enabled
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def fake_db():
    db = FakeSupabase()
    db.auth.add_user(HOST_TOKEN, HOST_ID, "host@example.com")
    db.auth.add_user(GUEST_TOKEN, GUEST_USER_ID, "guest@example.com")
    db.auth.add_user(OTHER_TOKEN, OTHER_USER_ID, "other@example.com")
    db.seed("events", {
        "id": EVENT_ID,
        "title": "Sam & Alex's Wedding",
        "event_date": "2027-06-05",
        "location": "Napa, CA",
        "description": None,
        "is_public": True,
        "header_image_url": None,
        "host_user_id": HOST_ID,
        "created_at": "2026-01-01T00:00:00+00:00",
    })
    db.seed("public_user_profiles", {"id": HOST_ID, "full_name": "Sam Host", "avatar_url": None})
    return db


@pytest.fixture
def twilio():
    return TwilioRecorder()


@pytest.fixture
def twilio_client(twilio):
    return TwilioClient(
        account_sid="ACtest",
        auth_token="secret",
        phone_number="+15550001111",
        transport=httpx.MockTransport(twilio),
    )


@pytest.fixture
def client(fake_db, twilio_client):
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_service_supabase] = lambda: fake_db
    app.dependency_overrides[get_optional_service_supabase] = lambda: fake_db
    app.dependency_overrides[get_session_client_factory] = lambda: fake_db.session_client
    app.dependency_overrides[get_twilio_client] = lambda: twilio_client
    with TestClient(app) as test_client:
        yield test_client
