"""Quote notifications: log-only sender and webhook sender (httpx)."""

from __future__ import annotations

import httpx

from app.application.dtos.quote import QuoteResult
from app.shared.telemetry.logging import get_logger
from app.shared.utils.masking import mask_email

logger = get_logger(__name__)


class LogOnlyQuoteNotifier:
    """IQuoteNotifier that logs instead of sending.

    Use when no webhook is configured. Production swaps in WebhookQuoteNotifier.
    """

    async def notify_quote_received(self, quote: QuoteResult) -> None:
        logger.info(
            "Quote notify: would notify staff of %s from %s",
            quote.reference,
            mask_email(quote.email),
        )


class WebhookQuoteNotifier:
    """POST the accepted quote as JSON to a staff webhook (e.g. mail relay or chat).

    Raises httpx.HTTPError on delivery failure; the caller records it.
    """

    def __init__(self, client: httpx.AsyncClient, url: str, company_name: str) -> None:
        self._client = client
        self._url = url
        self._company_name = company_name

    async def notify_quote_received(self, quote: QuoteResult) -> None:
        payload = {
            "subject": f"[{self._company_name}] New quote request {quote.reference}",
            "reference": quote.reference,
            "name": quote.name,
            "company": quote.company,
            "email": quote.email,
            "phone": quote.phone,
            "whatsapp": quote.whatsapp,
            "product_name": quote.product_name,
            "quantity": quote.quantity,
            "project_details": quote.project_details,
            "created_at": quote.created_at.isoformat(),
        }
        response = await self._client.post(self._url, json=payload)
        response.raise_for_status()
        logger.info("Quote notify: delivered %s", quote.reference)
