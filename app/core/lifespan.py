"""Process lifetime: build shared infrastructure on startup, release it on shutdown.

Everything request handlers reach through app.state is created here:
counter_store, http_client, quote_dispatcher, captcha_verifier (None unless
CAPTCHA keys are set) and tracer_provider (when tracing is on).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.application.interfaces.services import ICaptchaVerifier, ICounterStore, IQuoteNotifier
from app.application.services.quote_service import QuoteNotificationDispatcher
from app.core.config import Settings, get_settings
from app.infrastructure.cache import InMemoryCounterStore, RedisCounterStore
from app.infrastructure.persistence import database
from app.infrastructure.services import (
    DatabaseAuditSink,
    HttpCaptchaVerifier,
    LogOnlyQuoteNotifier,
    WebhookQuoteNotifier,
)
from app.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


async def _open_counter_store(settings: Settings) -> ICounterStore:
    if settings.counter_backend == "redis":
        store = RedisCounterStore(settings)
        await store.connect()
        return store
    logger.warning(
        "Using in-memory counter store; quote limits are per process and only "
        "correct for a single instance"
    )
    return InMemoryCounterStore()


def _quote_notifier(settings: Settings, http_client: httpx.AsyncClient) -> IQuoteNotifier:
    if not settings.quote_notification_webhook_url:
        return LogOnlyQuoteNotifier()
    return WebhookQuoteNotifier(
        http_client, settings.quote_notification_webhook_url, settings.company_name
    )


def _captcha_verifier(
    settings: Settings, http_client: httpx.AsyncClient
) -> ICaptchaVerifier | None:
    if not settings.captcha_enabled:
        return None
    logger.info("Captcha verification enabled for quote intake")
    return HttpCaptchaVerifier(
        http_client,
        settings.captcha_site_key,
        settings.captcha_secret_key.get_secret_value(),
        settings.captcha_timeout_seconds,
    )


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup, yield, shutdown.

    Shutdown drains pending quote notifications before the HTTP client and
    the stores they depend on are closed.
    """
    settings = get_settings()
    setup_logging()

    app.state.counter_store = await _open_counter_store(settings)
    app.state.http_client = httpx.AsyncClient(
        timeout=settings.quote_notification_timeout_seconds
    )
    app.state.quote_dispatcher = QuoteNotificationDispatcher(
        _quote_notifier(settings, app.state.http_client),
        DatabaseAuditSink(database.get_session_factory()),
    )
    app.state.captcha_verifier = _captcha_verifier(settings, app.state.http_client)

    app.state.tracer_provider = None
    if settings.telemetry_enabled:
        from app.shared.telemetry.telemetry import configure_tracing, instrument

        provider = configure_tracing(settings)
        instrument(app, provider, database.engine)
        app.state.tracer_provider = provider

    yield

    await app.state.quote_dispatcher.drain()
    await app.state.http_client.aclose()
    if isinstance(app.state.counter_store, RedisCounterStore):
        await app.state.counter_store.disconnect()

    if app.state.tracer_provider is not None:
        from app.shared.telemetry.telemetry import shutdown_tracing

        shutdown_tracing(app.state.tracer_provider)

    if database.engine is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
