"""HTTP tests for public quote intake and the staff listing."""

import time

import pytest

from app.main import app
from tests.conftest import login_headers
from tests.fakes import FakeCaptchaVerifier, UnavailableCounterStore

QUOTES = "/api/v1/quotes"
GENERIC_400 = {"error": "INVALID_REQUEST", "message": "Invalid request"}
GENERIC_429 = {"error": "RATE_LIMITED", "message": "Too many requests"}


def quote_form(**overrides) -> dict:
    form = {
        "name": "Jane Buyer",
        "company": "Acme Ltd",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "productName": "Cable tray",
        "quantity": "40",
        "projectDetails": "Warehouse fit-out",
        "honeypot": "",
        "formStartTs": int(time.time() * 1000) - 8000,
    }
    form.update(overrides)
    return form


async def test_accepts_quote(client, fakes) -> None:
    response = await client.post(QUOTES, json=quote_form())

    assert response.status_code == 201
    body = response.json()
    assert body["reference"].startswith("QR-")
    [quote] = fakes.quotes.quotes
    assert quote.reference == body["reference"]
    assert quote.product_name == "Cable tray"
    assert "quote.create" in fakes.audit.actions()


@pytest.mark.parametrize(
    "overrides",
    [
        {"honeypot": "https://spam.example"},
        {"honeypot": "x" * 600},
        {"honeypot": 1},
        {"honeypot": ["bot"]},
        {"formStartTs": None},
        {"formStartTs": "soon"},
        {"formStartTs": {"ms": 1}},
        {"formStartTs": int(time.time() * 1000) + 60_000},
        {"formStartTs": 0},
        {"isAdmin": True},
    ],
    ids=[
        "honeypot",
        "long-honeypot",
        "numeric-honeypot",
        "list-honeypot",
        "missing-timestamp",
        "text-timestamp",
        "object-timestamp",
        "future-timestamp",
        "stale",
        "unknown-field",
    ],
)
async def test_rejections_are_generic(client, fakes, overrides) -> None:
    response = await client.post(QUOTES, json=quote_form(**overrides))

    assert response.status_code == 400
    assert response.json() == GENERIC_400
    assert fakes.quotes.quotes == []
    assert "honeypot" not in response.text
    assert "form" not in response.text


async def test_too_fast(client) -> None:
    response = await client.post(QUOTES, json=quote_form(formStartTs=int(time.time() * 1000)))
    assert response.status_code == 400
    assert response.json() == GENERIC_400


async def test_timestamp_sent_as_digit_string_is_accepted(client) -> None:
    started = str(int(time.time() * 1000) - 8000)
    response = await client.post(QUOTES, json=quote_form(formStartTs=started))
    assert response.status_code == 201


class TestCaptcha:
    @pytest.fixture
    def captcha(self, client) -> FakeCaptchaVerifier:
        """Installed after the client fixture, which resets app.state.captcha_verifier."""
        verifier = FakeCaptchaVerifier()
        app.state.captcha_verifier = verifier
        return verifier

    async def test_valid_token_accepted(self, client, captcha) -> None:
        response = await client.post(QUOTES, json=quote_form(captchaToken="captcha-ok"))
        assert response.status_code == 201
        assert captcha.calls[0][0] == "captcha-ok"

    @pytest.mark.parametrize(
        "token", [None, "", 42, "forged"], ids=["absent", "empty", "number", "refused"]
    )
    async def test_missing_or_refused_token_is_generic(self, client, fakes, captcha, token) -> None:
        response = await client.post(QUOTES, json=quote_form(captchaToken=token))

        assert response.status_code == 400
        assert response.json() == GENERIC_400
        assert fakes.quotes.quotes == []

    async def test_provider_outage_fails_closed(self, client, fakes, captcha) -> None:
        captcha.unavailable = True

        response = await client.post(QUOTES, json=quote_form(captchaToken="captcha-ok"))

        assert response.status_code == 503
        assert response.json()["error"] == "SERVICE_UNAVAILABLE"
        assert fakes.quotes.quotes == []

    async def test_token_field_ignored_without_verifier(self, client) -> None:
        response = await client.post(QUOTES, json=quote_form(captchaToken="anything"))
        assert response.status_code == 201


async def test_duplicate_is_rate_limited(client, fakes) -> None:
    assert (await client.post(QUOTES, json=quote_form())).status_code == 201

    response = await client.post(QUOTES, json=quote_form(email="JANE@example.com", phone="+1-555-0100"))

    assert response.status_code == 429
    assert response.json() == GENERIC_429
    assert len(fakes.quotes.quotes) == 1


async def test_daily_cap(client) -> None:
    for i in range(5):
        response = await client.post(QUOTES, json=quote_form(phone=f"+1 555 01{i:02d}"))
        assert response.status_code == 201

    response = await client.post(QUOTES, json=quote_form(phone="+1 555 0999"))
    assert response.status_code == 429
    assert response.json() == GENERIC_429


async def test_invalid_email_is_validation_error(client) -> None:
    response = await client.post(QUOTES, json=quote_form(email="not-an-email"))
    assert response.status_code == 422
    assert "not-an-email" not in response.text


async def test_counter_store_down_fails_closed(client, fakes) -> None:
    app.state.counter_store = UnavailableCounterStore()

    response = await client.post(QUOTES, json=quote_form())

    assert response.status_code == 503
    assert response.json() == {
        "error": "SERVICE_UNAVAILABLE",
        "message": "Service temporarily unavailable",
    }
    assert fakes.quotes.quotes == []


async def test_notification_failure_does_not_fail_request(client, fakes) -> None:
    fakes.notifier.fail = True

    response = await client.post(QUOTES, json=quote_form())

    assert response.status_code == 201
    await app.state.quote_dispatcher.drain()
    assert fakes.audit.actions(success=False) == ["quote.notification"]


class TestListing:
    async def test_requires_authentication(self, client) -> None:
        assert (await client.get(QUOTES)).status_code == 401

    async def test_viewer_can_read(self, client, fakes, password_hash) -> None:
        await client.post(QUOTES, json=quote_form())
        viewer = fakes.admins.add("viewer@example.com", password_hash, "viewer")

        response = await client.get(QUOTES, headers=await login_headers(client, viewer.email))

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["email"] == "jane@example.com"

    async def test_status_filter(self, client, fakes, password_hash) -> None:
        await client.post(QUOTES, json=quote_form())
        viewer = fakes.admins.add("viewer@example.com", password_hash, "viewer")
        headers = await login_headers(client, viewer.email)

        closed = await client.get(QUOTES, params={"status": "closed"}, headers=headers)
        assert closed.json()["total"] == 0
        bogus = await client.get(QUOTES, params={"status": "archived"}, headers=headers)
        assert bogus.status_code == 422
