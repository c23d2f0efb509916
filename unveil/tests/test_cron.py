import httpx
import pytest

from unveil.config import settings
from unveil.main import app
from unveil.modules.cron.routes import get_processor_http_client

CRON_URL = "/api/cron/process-messages"


class ProcessorStub:
    def __init__(self, status_code=200, payload=None, error=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {
            "success": True, "message": "No messages to process", "processed": 0
        }
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def processor_stub(client):
    stub = ProcessorStub()
    app.dependency_overrides[get_processor_http_client] = (
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(stub))
    )
    return stub


@pytest.mark.parametrize("method", ["GET", "POST"])
def test_relays_to_processor(client, processor_stub, method):
    response = client.request(method, CRON_URL)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["timestamp"]
    assert body["result"] == {"success": True, "message": "No messages to process", "processed": 0}

    relayed = processor_stub.requests[0]
    assert relayed.method == "POST"
    assert relayed.url.path == "/api/messages/process-scheduled"


def test_secret_required_when_configured(client, processor_stub, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")

    missing = client.post(CRON_URL)
    wrong = client.get(CRON_URL, headers={"Authorization": "Bearer nope"})
    right = client.get(CRON_URL, headers={"Authorization": "Bearer s3cret"})

    assert missing.status_code == 401
    assert missing.json() == {"error": "Unauthorized"}
    assert wrong.status_code == 401
    assert right.status_code == 200
    assert len(processor_stub.requests) == 1


def test_processor_error_is_reported(client, processor_stub):
    processor_stub.status_code = 500
    processor_stub.payload = {"error": "Failed to process scheduled messages"}

    response = client.post(CRON_URL)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Cron job failed"
    assert body["details"] == "Message processor failed: Failed to process scheduled messages"
    assert body["timestamp"]


def test_unreachable_processor(client, processor_stub):
    processor_stub.error = httpx.ConnectError("connection refused")

    response = client.post(CRON_URL)

    assert response.status_code == 500
    assert response.json()["details"] == "connection refused"


def test_end_to_end_through_real_processor(client, fake_db, twilio):
    # Relay into the app itself instead of a stub
    app.dependency_overrides[get_processor_http_client] = lambda: httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app)
    )

    response = client.post(CRON_URL)

    assert response.status_code == 200
    assert response.json()["result"] == {"success": True, "message": "No messages to process", "processed": 0}


def test_relay_forwards_the_secret(client, processor_stub, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")

    client.post(CRON_URL, headers={"Authorization": "Bearer s3cret"})

    assert processor_stub.requests[0].headers["authorization"] == "Bearer s3cret"


def test_end_to_end_with_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret")
    app.dependency_overrides[get_processor_http_client] = lambda: httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app)
    )

    response = client.post(CRON_URL, headers={"Authorization": "Bearer s3cret"})

    assert response.status_code == 200
    assert response.json()["result"]["processed"] == 0
