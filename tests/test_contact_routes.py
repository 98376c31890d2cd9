"""Tests for the contact API route.

The app is built per test by ``create_app`` with an isolated in-memory
ledger, a fake clock and a fake email provider (see conftest.py). The
TestClient connects from the host "testclient", which is the rate-limit key.
"""

from fastapi.testclient import TestClient

from app.core.exception_handlers import SYSTEM_UNAVAILABLE_MESSAGE
from app.services.contact_service import SUCCESS_MESSAGE
from tests.fakes import FakeClock, FakeEmailProvider

URL = "/api/contact"


def test_minimal_submission_uses_defaults(
    client: TestClient, provider: FakeEmailProvider, valid_payload: dict
) -> None:
    response = client.post(URL, json=valid_payload)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": SUCCESS_MESSAGE, "id": "msg-1"}

    email = provider.sent[0]
    assert email.subject == "New Contact: Jo - General Inquiry"
    assert "Not provided" in email.html
    assert "testclient" in email.html


def test_full_submission(client: TestClient, provider: FakeEmailProvider) -> None:
    response = client.post(
        URL,
        json={
            "name": "  Ada Lovelace  ",
            "email": " ada@example.org ",
            "message": "I would like a quote for the premium package.",
            "package": "Premium",
            "phone": "+44 20 7946 0000",
        },
    )

    assert response.status_code == 200
    email = provider.sent[0]
    assert email.subject == "New Contact: Ada Lovelace - Premium"
    assert email.reply_to == "ada@example.org"
    assert "+44 20 7946 0000" in email.html


def test_missing_fields_returns_400(client: TestClient, provider: FakeEmailProvider) -> None:
    response = client.post(URL, json={"name": "Jo"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Name, email, and message are required."
    assert provider.sent == []


def test_empty_body_returns_400(client: TestClient) -> None:
    response = client.post(URL)

    assert response.status_code == 400
    assert response.json()["message"] == "Name, email, and message are required."


def test_malformed_json_returns_400(client: TestClient) -> None:
    response = client.post(
        URL,
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_validation_messages(client: TestClient, valid_payload: dict) -> None:
    cases = [
        ({"name": "J"}, "Name must be at least 2 characters."),
        ({"email": "a b@c.com"}, "Please provide a valid email address."),
        ({"email": "a@b"}, "Please provide a valid email address."),
        ({"message": "123456789"}, "Message must be at least 10 characters."),
    ]
    for overrides, expected in cases:
        response = client.post(URL, json={**valid_payload, **overrides})
        assert response.status_code == 400
        assert response.json()["message"] == expected


def test_boundaries_accepted(client: TestClient, valid_payload: dict) -> None:
    response = client.post(
        URL,
        json={**valid_payload, "name": "Jo", "email": "a@b.co", "message": "1234567890"},
    )
    assert response.status_code == 200


def test_eleventh_submission_returns_429(
    client: TestClient, provider: FakeEmailProvider, clock: FakeClock, valid_payload: dict
) -> None:
    for _ in range(10):
        assert client.post(URL, json=valid_payload).status_code == 200
        clock.advance(30)

    response = client.post(URL, json=valid_payload)

    assert response.status_code == 429
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Too many submissions. Please try again in 15 minutes."
    assert response.headers["Retry-After"] == "600"
    assert response.headers["X-RateLimit-Limit"] == "10"
    assert len(provider.sent) == 10


def test_rejected_attempt_does_not_extend_window(
    client: TestClient, clock: FakeClock, valid_payload: dict
) -> None:
    for _ in range(10):
        client.post(URL, json=valid_payload)

    clock.advance(600)
    assert client.post(URL, json=valid_payload).status_code == 429

    # Window measured from the accepted submissions, not the rejected one
    clock.advance(300)
    assert client.post(URL, json=valid_payload).status_code == 200


def test_invalid_submissions_do_not_consume_slots(
    client: TestClient, valid_payload: dict
) -> None:
    for _ in range(15):
        assert client.post(URL, json={**valid_payload, "name": "J"}).status_code == 400

    assert client.post(URL, json=valid_payload).status_code == 200


def test_provider_failure_returns_500_and_is_not_counted(
    client: TestClient, provider: FakeEmailProvider, valid_payload: dict
) -> None:
    for _ in range(9):
        assert client.post(URL, json=valid_payload).status_code == 200

    provider.fail = True
    for _ in range(3):
        response = client.post(URL, json=valid_payload)
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": SYSTEM_UNAVAILABLE_MESSAGE,
            "request_id": response.headers["X-Request-ID"],
        }

    provider.fail = False
    # Only the 9 successes count, so one more fits before the limit
    assert client.post(URL, json=valid_payload).status_code == 200
    assert client.post(URL, json=valid_payload).status_code == 429


def test_provider_error_detail_is_not_leaked(
    client: TestClient, provider: FakeEmailProvider, valid_payload: dict
) -> None:
    provider.fail = True

    response = client.post(URL, json=valid_payload)

    assert "provider said no" not in response.text


def test_clients_are_limited_independently(app, monkeypatch, valid_payload: dict) -> None:
    from app.core.config import settings

    monkeypatch.setattr(settings.app, "trust_forwarded_for", True)
    client = TestClient(app)
    for _ in range(10):
        client.post(URL, json=valid_payload, headers={"X-Forwarded-For": "10.0.0.1"})

    blocked = client.post(URL, json=valid_payload, headers={"X-Forwarded-For": "10.0.0.1"})
    other = client.post(URL, json=valid_payload, headers={"X-Forwarded-For": "10.0.0.2, 10.0.0.9"})

    assert blocked.status_code == 429
    assert other.status_code == 200


def test_unknown_route_returns_404(client: TestClient) -> None:
    for method, path in [("GET", "/api/unknown"), ("GET", "/"), ("GET", URL), ("DELETE", "/api/health")]:
        response = client.request(method, path)
        assert response.status_code == 404
        assert response.json()["message"] == "Endpoint not found"
        assert response.json()["success"] is False


def test_cors_preflight_allows_any_origin(client: TestClient) -> None:
    response = client.options(
        URL,
        headers={
            "Origin": "https://www.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://www.example.com")
