"""Tests for the database audit sink, the webhook quote notifier and the CAPTCHA verifier."""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from app.application.dtos.audit_log import audit_entry
from app.application.dtos.quote import QuoteResult
from app.domain.exceptions import StoreUnavailableException
from app.infrastructure.services import (
    DatabaseAuditSink,
    HttpCaptchaVerifier,
    WebhookQuoteNotifier,
)
from app.infrastructure.services import audit_sink as audit_sink_module
from app.shared.context import set_request_id


def _session_factory(session=None, error: Exception | None = None) -> MagicMock:
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session, side_effect=error)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


class TestDatabaseAuditSink:
    async def test_write_failure_is_swallowed_and_logged(self, caplog) -> None:
        error = OperationalError("INSERT INTO audit_log", {}, Exception("connection lost"))
        sink = DatabaseAuditSink(_session_factory(error=error))

        await sink.record(audit_entry("auth.login", "auth", success=False))

        assert "Audit write failed" in caplog.text

    async def test_attaches_request_id(self, monkeypatch) -> None:
        repo = MagicMock()
        repo.return_value.create = AsyncMock()
        monkeypatch.setattr(audit_sink_module, "AuditLogRepository", repo)
        sink = DatabaseAuditSink(_session_factory(session=object()))

        set_request_id("req-42")
        try:
            await sink.record(audit_entry("auth.logout", "auth"))
        finally:
            set_request_id(None)

        [entry] = repo.return_value.create.await_args.args
        assert entry.request_id == "req-42"


QUOTE = QuoteResult(
    id="q1",
    reference="QR-20260115-ABC123",
    name="Jane Buyer",
    email="jane@example.com",
    phone="+15550100",
    company=None,
    whatsapp=None,
    product_name="Cable tray",
    quantity="40",
    project_details=None,
    status="new",
    created_at=datetime(2026, 1, 15, 12, 0, tzinfo=UTC),
)


class TestWebhookQuoteNotifier:
    async def test_posts_quote(self) -> None:
        received: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(204)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            notifier = WebhookQuoteNotifier(client, "https://hooks.example/quotes", "Acme Electric")
            await notifier.notify_quote_received(QUOTE)

        [payload] = received
        assert payload["reference"] == QUOTE.reference
        assert payload["subject"] == "[Acme Electric] New quote request QR-20260115-ABC123"

    async def test_delivery_failure_raises(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(502))
        async with httpx.AsyncClient(transport=transport) as client:
            notifier = WebhookQuoteNotifier(client, "https://hooks.example/quotes", "Acme")
            with pytest.raises(httpx.HTTPStatusError):
                await notifier.notify_quote_received(QUOTE)


class TestHttpCaptchaVerifier:
    @staticmethod
    def _client(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    async def test_turnstile_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        async with self._client(handler) as client:
            verifier = HttpCaptchaVerifier(client, "0x4AAAAAAA", "turnstile-secret")
            assert await verifier.verify("tok", "198.51.100.7") is True

        [request] = seen
        assert str(request.url) == "https://challenges.cloudflare.com/turnstile/v0/siteverify"
        form = dict(httpx.QueryParams(request.content.decode()))
        assert form == {"secret": "turnstile-secret", "response": "tok", "remoteip": "198.51.100.7"}

    async def test_hcaptcha_refusal(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(
                200, json={"success": False, "error-codes": ["invalid-input-response"]}
            )

        async with self._client(handler) as client:
            verifier = HttpCaptchaVerifier(client, "10000000-ffff-ffff-ffff-000000000001", "s")
            assert await verifier.verify("tok", None) is False

        assert seen == ["https://hcaptcha.com/siteverify"]

    @pytest.mark.parametrize(
        "response",
        [httpx.Response(502), httpx.Response(200, content=b"<html>")],
        ids=["bad-gateway", "not-json"],
    )
    async def test_provider_failure_is_unavailable(self, response) -> None:
        async with self._client(lambda request: response) as client:
            verifier = HttpCaptchaVerifier(client, "0xkey", "s")
            with pytest.raises(StoreUnavailableException):
                await verifier.verify("tok", None)

    async def test_network_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with self._client(handler) as client:
            verifier = HttpCaptchaVerifier(client, "0xkey", "s")
            with pytest.raises(StoreUnavailableException):
                await verifier.verify("tok", None)
